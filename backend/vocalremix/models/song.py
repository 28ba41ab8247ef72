from typing import Any

from pydantic import BaseModel

from vocalremix.models.generation import TimestampedLyrics


class Song(BaseModel):
    id: str
    input_url: str
    output_url: str | None = None
    style: str
    prompt: str | None = None
    metadata: dict[str, Any] = {}  # analysis plus generation details
    lyrics: TimestampedLyrics | None = None
    task_id: str | None = None  # provider task, live generations only
    created_at: str


class SongResponse(Song):
    success: bool = True


class SongListResponse(BaseModel):
    success: bool = True
    songs: list[Song]
    count: int
