from fastapi import APIRouter, Depends, HTTPException

from vocalremix.deps import get_registry
from vocalremix.models.api import StylesResponse
from vocalremix.models.song import SongListResponse, SongResponse
from vocalremix.services.styles import list_styles
from vocalremix.storage.song_registry import SongRegistry

router = APIRouter(prefix="/api", tags=["songs"])


@router.get("/songs", response_model=SongListResponse)
async def list_songs(registry: SongRegistry = Depends(get_registry)):
    """List all songs, newest first."""
    songs = registry.list_all()
    return SongListResponse(songs=songs, count=len(songs))


@router.get("/result/{song_id}", response_model=SongResponse)
async def get_result(song_id: str, registry: SongRegistry = Depends(get_registry)):
    song = registry.get(song_id)
    if song is None:
        raise HTTPException(status_code=404, detail="Song not found")
    return SongResponse(**song.model_dump())


@router.get("/styles", response_model=StylesResponse)
async def get_styles():
    return StylesResponse(styles=list_styles())
