"""Client for the VocalRemix HTTP API.

Drives the whole flow from a local audio file to a playable remix: upload,
analyze, generate, then poll the status endpoint until the provider is done.
"""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
from pydantic import BaseModel

from vocalremix.errors import GenerationFailedError, PollingTimeoutError
from vocalremix.models.generation import GenerationStatus, TimestampedLyrics, TrackMetadata
from vocalremix.services.suno import Sleep

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, GenerationStatus], None]


def parse_status(raw: Any) -> GenerationStatus:
    """Anything the server reports that we don't know is still queued."""
    try:
        return GenerationStatus(raw)
    except ValueError:
        return GenerationStatus.queued


class PlayableResult(BaseModel):
    song_id: str | None = None
    audio_url: str
    image_url: str | None = None
    metadata: TrackMetadata | None = None
    lyrics: TimestampedLyrics | None = None


class RemixClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 300.0,
    ) -> None:
        self._client = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "RemixClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _json(self, resp: httpx.Response) -> dict[str, Any]:
        resp.raise_for_status()
        return resp.json()

    async def upload(self, path: Path, content_type: str = "audio/webm") -> str:
        with open(path, "rb") as f:
            resp = await self._client.post(
                "/api/upload", files={"audio": (path.name, f.read(), content_type)}
            )
        return (await self._json(resp))["fileUrl"]

    async def process(self, file_url: str) -> dict[str, Any]:
        resp = await self._client.post("/api/process", json={"fileUrl": file_url})
        data = await self._json(resp)
        data.pop("success", None)
        return data

    async def generate(
        self,
        file_url: str,
        style: str,
        prompt: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        body = {"fileUrl": file_url, "style": style, "prompt": prompt, "metadata": metadata}
        resp = await self._client.post("/api/generate", json=body)
        return await self._json(resp)

    async def status(self, task_id: str) -> dict[str, Any]:
        resp = await self._client.get(f"/api/status/{task_id}")
        return await self._json(resp)

    async def wait_for_result(
        self,
        task_id: str,
        on_progress: ProgressCallback | None = None,
        max_attempts: int = 60,
        interval: float = 5.0,
        sleep: Sleep = asyncio.sleep,
    ) -> PlayableResult:
        """Poll the status endpoint until the remix is playable or has failed."""
        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                await sleep(interval)
            try:
                data = await self.status(task_id)
            except (httpx.HTTPError, ValueError) as e:
                logger.warning(f"Polling attempt {attempt}/{max_attempts} failed: {e}")
                continue
            if not isinstance(data, dict):
                logger.warning(f"Polling attempt {attempt}/{max_attempts} got a non-object body")
                continue
            status = parse_status(data.get("status"))

            if on_progress is not None:
                on_progress(attempt, max_attempts, status)

            if status == GenerationStatus.error:
                raise GenerationFailedError(data.get("error") or "Generation failed")
            if status == GenerationStatus.complete and data.get("audioUrl"):
                return PlayableResult(
                    audio_url=data["audioUrl"],
                    image_url=data.get("imageUrl"),
                    metadata=data.get("metadata"),
                    lyrics=data.get("lyrics"),
                )

        raise PollingTimeoutError(task_id, max_attempts, interval)

    async def remix(
        self,
        path: Path,
        style: str,
        prompt: str | None = None,
        on_progress: ProgressCallback | None = None,
        **poll_options,
    ) -> PlayableResult:
        file_url = await self.upload(path)
        analysis = await self.process(file_url)
        started = await self.generate(file_url, style, prompt, metadata=analysis)

        if started.get("taskId"):
            result = await self.wait_for_result(started["taskId"], on_progress, **poll_options)
            return result.model_copy(update={"song_id": started.get("songId")})

        return PlayableResult(
            song_id=started.get("songId"),
            audio_url=started["audioUrl"],
            image_url=started.get("previewImage"),
            metadata=started.get("metadata"),
            lyrics=started.get("lyrics"),
        )
