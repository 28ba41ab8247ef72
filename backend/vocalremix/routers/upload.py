import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from vocalremix.deps import get_analyzer, get_file_manager
from vocalremix.errors import UploadRejected
from vocalremix.models.api import AnalysisResponse, ProcessRequest, UploadResponse
from vocalremix.services.analysis import AudioAnalyzer
from vocalremix.storage.file_manager import FileManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["audio"])


@router.post("/upload", response_model=UploadResponse)
async def upload_audio(
    audio: UploadFile | None = File(None),
    files: FileManager = Depends(get_file_manager),
):
    """Store an uploaded or recorded vocal clip."""
    if audio is None:
        raise HTTPException(status_code=400, detail="No audio file provided")

    content = await audio.read()
    try:
        file_url, file_name = files.save_upload(
            audio.filename or "recording.webm", audio.content_type, content
        )
    except UploadRejected as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OSError as e:
        logger.exception("Failed to store upload")
        raise HTTPException(status_code=500, detail=f"Failed to store upload: {e}")

    logger.info(f"Stored upload {file_name} ({len(content)} bytes)")
    return UploadResponse(file_url=file_url, file_name=file_name)


@router.post("/process", response_model=AnalysisResponse)
async def process_audio(
    req: ProcessRequest,
    analyzer: AudioAnalyzer = Depends(get_analyzer),
):
    """Transcribe the clip and infer mood, key and tempo."""
    if not req.file_url:
        raise HTTPException(status_code=400, detail="No file URL provided")

    try:
        analysis = await analyzer.run(req.file_url)
    except Exception:
        logger.exception("Audio analysis failed")
        raise HTTPException(status_code=500, detail="Failed to process audio")
    return AnalysisResponse(**analysis.model_dump())
