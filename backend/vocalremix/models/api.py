from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from vocalremix.models.generation import GenerationStatus, TimestampedLyrics, TrackMetadata
from vocalremix.models.style import MusicStyle


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class UploadResponse(CamelModel):
    success: bool = True
    file_url: str = Field(alias="fileUrl")
    file_name: str = Field(alias="fileName")
    storage: str = "local"


class ProcessRequest(CamelModel):
    file_url: str | None = Field(default=None, alias="fileUrl")


class AnalysisResponse(CamelModel):
    success: bool = True
    transcription: str
    key: str | None = None
    bpm: float | None = None
    mood: str | None = None
    duration: float | None = None


class GenerateRequest(CamelModel):
    file_url: str | None = Field(default=None, alias="fileUrl")
    style: str | None = None
    prompt: str | None = None
    metadata: dict[str, Any] | None = None


class GenerateResponse(CamelModel):
    success: bool = True
    status: GenerationStatus
    song_id: str = Field(alias="songId")
    task_id: str | None = Field(default=None, alias="taskId")
    audio_url: str | None = Field(default=None, alias="audioUrl")
    preview_image: str | None = Field(default=None, alias="previewImage")
    metadata: TrackMetadata | None = None
    lyrics: TimestampedLyrics | None = None


class StatusResponse(CamelModel):
    success: bool = True
    status: GenerationStatus
    audio_url: str | None = Field(default=None, alias="audioUrl")
    image_url: str | None = Field(default=None, alias="imageUrl")
    metadata: TrackMetadata | None = None
    lyrics: TimestampedLyrics | None = None
    error: str | None = None


class StylesResponse(BaseModel):
    styles: list[MusicStyle]
