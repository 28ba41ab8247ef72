from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class GenerationStatus(StrEnum):
    queued = "queued"
    processing = "processing"
    complete = "complete"
    error = "error"


class TrackMetadata(BaseModel):
    title: str | None = None
    tags: list[str] = []
    duration: float | None = None


class GenerationTask(BaseModel):
    model_config = ConfigDict(frozen=True)

    task_id: str
    status: GenerationStatus
    audio_url: str | None = None
    image_url: str | None = None
    audio_id: str | None = None  # first candidate track, needed for lyrics
    metadata: TrackMetadata = Field(default_factory=TrackMetadata)
    error_message: str | None = None
    raw_status: str | None = None


class TimestampedWord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    word: str
    start_s: float = Field(alias="startS")
    end_s: float = Field(alias="endS")
    success: bool = True
    palign: float = 0.0


class TimestampedLyrics(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    aligned_words: list[TimestampedWord] = Field(alias="alignedWords")
    waveform_data: list[float] = Field(default=[], alias="waveformData")
    hoot_cer: float | None = Field(default=None, alias="hootCer")
    is_streamed: bool = Field(default=False, alias="isStreamed")


class LiveSubmission(BaseModel):
    kind: Literal["live"] = "live"
    task_id: str


class MockSubmission(BaseModel):
    kind: Literal["mock"] = "mock"
    task: GenerationTask


Submission = LiveSubmission | MockSubmission
