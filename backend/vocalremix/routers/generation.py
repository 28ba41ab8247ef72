import logging

from fastapi import APIRouter, Depends, HTTPException

from vocalremix.config import Settings
from vocalremix.deps import get_orchestrator, get_registry, get_settings
from vocalremix.errors import ConfigurationError, ProviderStatusError, UnreachableInputError
from vocalremix.models.api import GenerateRequest, GenerateResponse, StatusResponse
from vocalremix.models.generation import GenerationStatus, LiveSubmission
from vocalremix.services.orchestrator import GenerationOrchestrator
from vocalremix.services.styles import build_prompt, get_style
from vocalremix.storage.song_registry import SongRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["generation"])


@router.post("/generate", response_model=GenerateResponse, response_model_exclude_none=True)
async def generate(
    req: GenerateRequest,
    registry: SongRegistry = Depends(get_registry),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_settings),
):
    """Start a remix. Live generations return a taskId to poll; mock ones return the result."""
    if not req.file_url or not req.style:
        raise HTTPException(status_code=400, detail="Missing required parameters")

    style = get_style(req.style)
    if style is None:
        raise HTTPException(status_code=400, detail="Invalid style")

    prompt = build_prompt(style, req.prompt)
    song = registry.create(req.file_url, req.style, req.prompt or None, req.metadata or {})
    logger.info(f"Song {song.id} created for {req.file_url} ({style.name})")

    try:
        submission = await orchestrator.submit(req.file_url, req.style, prompt)
    except UnreachableInputError as e:
        registry.merge_metadata(song.id, {"error": str(e)})
        raise HTTPException(status_code=400, detail=str(e))

    if isinstance(submission, LiveSubmission):
        registry.attach_task(song.id, submission.task_id)
        if settings.watch_in_background:
            orchestrator.watch(submission.task_id, song.id)
        return GenerateResponse(
            status=GenerationStatus.queued,
            song_id=song.id,
            task_id=submission.task_id,
        )

    task = submission.task
    orchestrator.record_completion(song.id, task)
    return GenerateResponse(
        status=task.status,
        song_id=song.id,
        audio_url=task.audio_url,
        preview_image=task.image_url,
        metadata=task.metadata,
    )


@router.get("/status/{task_id}", response_model=StatusResponse, response_model_exclude_none=True)
async def get_status(
    task_id: str,
    registry: SongRegistry = Depends(get_registry),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """Query the provider once. Completed tasks are recorded on their song."""
    if not task_id.strip():
        raise HTTPException(status_code=400, detail="Task ID required")

    try:
        task = await orchestrator.poll_status(task_id)
    except (ConfigurationError, ProviderStatusError) as e:
        raise HTTPException(status_code=500, detail=str(e))

    lyrics = None
    if task.status == GenerationStatus.complete:
        lyrics = await orchestrator.lyrics_for(task)
        song = registry.find_by_task(task_id)
        if song is not None:
            orchestrator.record_completion(song.id, task, lyrics)

    return StatusResponse(
        status=task.status,
        audio_url=task.audio_url,
        image_url=task.image_url,
        metadata=task.metadata,
        lyrics=lyrics,
        error=task.error_message,
    )
