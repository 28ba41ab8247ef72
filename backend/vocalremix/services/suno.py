import asyncio
import logging
from collections.abc import Awaitable, Callable

import httpx
from pydantic import ValidationError

from vocalremix.config import Settings
from vocalremix.errors import (
    ConfigurationError,
    GenerationFailedError,
    LyricsUnavailable,
    PollingTimeoutError,
    ProbeTimeoutError,
    ProviderStatusError,
    ProviderSubmissionError,
    ProviderTimeoutError,
    UnreachableInputError,
)
from vocalremix.models.generation import (
    GenerationStatus,
    GenerationTask,
    TimestampedLyrics,
    TrackMetadata,
)

logger = logging.getLogger(__name__)

# Evaluated top to bottom against the upper-cased provider status.
# Anything that matches no rule is treated as queued.
STATUS_RULES: list[tuple[Callable[[str], bool], GenerationStatus]] = [
    (lambda s: s == "SUCCESS", GenerationStatus.complete),
    (lambda s: "FAILED" in s or "ERROR" in s, GenerationStatus.error),
    (lambda s: s in ("TEXT_SUCCESS", "FIRST_SUCCESS"), GenerationStatus.processing),
    (lambda s: s == "PENDING", GenerationStatus.queued),
]

# Creative controls for add-instrumental, all in [0, 1].
# audioWeight stays high so the vocal remains clearly audible.
AUDIO_WEIGHT = 0.9
STYLE_WEIGHT = 0.65
WEIRDNESS_CONSTRAINT = 0.5
NEGATIVE_TAGS = "harsh, aggressive, distorted"

Sleep = Callable[[float], Awaitable[None]]


def map_status(raw_status: str | None) -> GenerationStatus:
    """Map a raw SunoAPI.org status onto the four canonical states."""
    if not raw_status:
        return GenerationStatus.queued
    status = raw_status.upper()
    for matches, mapped in STATUS_RULES:
        if matches(status):
            return mapped
    return GenerationStatus.queued


def resolve_audio_url(file_url: str, public_base_url: str) -> str:
    """Turn a path served by this app into an absolute URL the provider can fetch."""
    if file_url.startswith("/"):
        return f"{public_base_url.rstrip('/')}{file_url}"
    return file_url


def parse_task(task_id: str, data: dict) -> GenerationTask:
    raw_status = data.get("status")
    status = map_status(raw_status)

    suno_data = (data.get("response") or {}).get("sunoData") or []
    track = suno_data[0] if suno_data else {}

    tags = track.get("tags") or ""
    if isinstance(tags, str):
        tags = [t.strip() for t in tags.split(",") if t.strip()]

    if data.get("errorCode") or data.get("errorMessage"):
        logger.warning(
            f"Task {task_id} reports error {data.get('errorCode')}: "
            f"{data.get('errorMessage')} (status {raw_status})"
        )

    return GenerationTask(
        task_id=task_id,
        status=status,
        audio_url=track.get("audioUrl") or track.get("streamAudioUrl") or None,
        image_url=track.get("imageUrl") or None,
        audio_id=track.get("id") or None,
        metadata=TrackMetadata(
            title=track.get("title"),
            tags=tags,
            duration=track.get("duration"),
        ),
        error_message=data.get("errorMessage") if status == GenerationStatus.error else None,
        raw_status=raw_status,
    )


class SunoClient:
    """Async client for the SunoAPI.org add-instrumental workflow."""

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not settings.live_generation:
            raise ConfigurationError("SUNO_API_KEY not configured")
        self.settings = settings
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.settings.suno_api_key}"}

    async def probe(self, audio_url: str) -> None:
        """HEAD the input audio so we fail before the provider silently does."""
        try:
            async with self._client(self.settings.probe_timeout) as client:
                resp = await client.head(audio_url, follow_redirects=True)
        except httpx.TimeoutException as e:
            raise ProbeTimeoutError(f"Timed out probing audio at {audio_url}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise UnreachableInputError(
                f"Audio file not accessible at {audio_url}. Suno will not be able to fetch it."
            ) from e

        # Some hosts refuse HEAD outright; that says nothing about GET
        if resp.status_code >= 400 and resp.status_code != 405:
            raise UnreachableInputError(
                f"Audio file not accessible at {audio_url} (HTTP {resp.status_code})"
            )
        logger.info(
            f"Audio URL ok: {resp.status_code} "
            f"{resp.headers.get('content-type')} {resp.headers.get('content-length')} bytes"
        )

    def build_payload(self, audio_url: str, style: str, prompt: str | None) -> dict:
        return {
            "uploadUrl": audio_url,
            "title": f"{style} Remix",
            "tags": prompt or f"{style}, upbeat, modern",
            "negativeTags": NEGATIVE_TAGS,
            "callBackUrl": self.settings.suno_callback_url,
            "model": self.settings.suno_model,
            "audioWeight": AUDIO_WEIGHT,
            "styleWeight": STYLE_WEIGHT,
            "weirdnessConstraint": WEIRDNESS_CONSTRAINT,
        }

    async def submit(self, file_url: str, style: str, prompt: str | None = None) -> str:
        """Probe the input, start an add-instrumental task, return its taskId."""
        audio_url = resolve_audio_url(file_url, self.settings.public_base_url)
        await self.probe(audio_url)

        payload = self.build_payload(audio_url, style, prompt)
        logger.info(f"Submitting add-instrumental for {audio_url} ({style})")
        try:
            async with self._client(self.settings.submit_timeout) as client:
                resp = await client.post(
                    f"{self.settings.suno_base_url}/generate/add-instrumental",
                    headers=self._headers,
                    json=payload,
                )
            resp.raise_for_status()
            data = resp.json()
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError("Suno submission timed out") from e
        except httpx.HTTPStatusError as e:
            raise ProviderSubmissionError(
                f"Suno API error: {e.response.status_code} {e.response.reason_phrase}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise ProviderSubmissionError(f"Suno submission failed: {e}") from e

        if not isinstance(data, dict):
            raise ProviderSubmissionError("Unexpected response format from Suno")
        task_id = (data.get("data") or {}).get("taskId")
        if data.get("code") != 200 or not task_id:
            raise ProviderSubmissionError(data.get("msg") or "Failed to start generation")

        logger.info(f"Suno task started: {task_id}")
        return task_id

    async def poll_status(self, task_id: str) -> GenerationTask:
        """Query the task once. Incomplete tasks are reported by status, not by raising."""
        try:
            async with self._client(self.settings.status_timeout) as client:
                resp = await client.get(
                    f"{self.settings.suno_base_url}/generate/record-info",
                    headers=self._headers,
                    params={"taskId": task_id},
                )
            resp.raise_for_status()
            result = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ProviderStatusError(f"Status check failed for {task_id}: {e}") from e

        if not isinstance(result, dict) or result.get("code") != 200:
            msg = result.get("msg") if isinstance(result, dict) else None
            raise ProviderStatusError(msg or "Failed to get task status")

        try:
            task = parse_task(task_id, result.get("data") or {})
        except (AttributeError, ValidationError) as e:
            raise ProviderStatusError(f"Malformed status payload for {task_id}: {e}") from e
        if task.status == GenerationStatus.complete and not task.audio_url:
            raise ProviderStatusError(f"Task {task_id} is complete but has no audio URL")
        return task

    async def await_completion(
        self,
        task_id: str,
        max_attempts: int | None = None,
        interval: float | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> GenerationTask:
        """Poll until the task is complete or failed.

        Transient failures of a single attempt are logged and polling goes on.
        A provider-reported error ends the wait immediately.
        """
        max_attempts = max_attempts or self.settings.poll_max_attempts
        interval = self.settings.poll_interval_seconds if interval is None else interval

        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                await sleep(interval)
            try:
                task = await self.poll_status(task_id)
            except ProviderStatusError as e:
                logger.warning(f"Polling attempt {attempt}/{max_attempts} failed: {e}")
                continue

            if task.status == GenerationStatus.complete:
                logger.info(f"Task {task_id} complete after {attempt} attempts")
                return task
            if task.status == GenerationStatus.error:
                raise GenerationFailedError(task.error_message or "Generation failed")

            logger.info(f"Task {task_id} status: {task.status} ({attempt}/{max_attempts})")

        raise PollingTimeoutError(task_id, max_attempts, interval)

    async def _get_lyrics(self, task_id: str, audio_id: str | None, music_index: int) -> TimestampedLyrics:
        body: dict = {"taskId": task_id}
        if audio_id:
            body["audioId"] = audio_id
        else:
            body["musicIndex"] = music_index

        try:
            async with self._client(self.settings.lyrics_timeout) as client:
                resp = await client.post(
                    f"{self.settings.suno_base_url}/generate/get-timestamped-lyrics",
                    headers=self._headers,
                    json=body,
                )
            resp.raise_for_status()
            result = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise LyricsUnavailable(str(e)) from e

        if not isinstance(result, dict) or result.get("code") != 200 or not result.get("data"):
            raise LyricsUnavailable(result.get("msg") if isinstance(result, dict) else "bad response")
        try:
            return TimestampedLyrics.model_validate(result["data"])
        except ValidationError as e:
            raise LyricsUnavailable(str(e)) from e

    async def fetch_lyrics(
        self,
        task_id: str,
        audio_id: str | None = None,
        music_index: int = 0,
    ) -> TimestampedLyrics | None:
        """Fetch word-aligned lyrics. Never raises; lyrics are optional."""
        try:
            lyrics = await self._get_lyrics(task_id, audio_id, music_index)
        except Exception as e:
            logger.warning(f"No lyrics for task {task_id}: {e}")
            return None
        logger.info(f"Got timestamped lyrics: {len(lyrics.aligned_words)} words")
        return lyrics
