import asyncio
import logging

import httpx

from vocalremix.config import Settings
from vocalremix.errors import (
    ConfigurationError,
    GenerationFailedError,
    PollingTimeoutError,
    ProviderSubmissionError,
)
from vocalremix.models.generation import (
    GenerationTask,
    LiveSubmission,
    MockSubmission,
    Submission,
    TimestampedLyrics,
)
from vocalremix.services.mock_generator import generate_mock
from vocalremix.services.suno import SunoClient
from vocalremix.storage.song_registry import SongRegistry

logger = logging.getLogger(__name__)


class GenerationOrchestrator:
    """Submits generations, tracks them to completion and records the output."""

    def __init__(
        self,
        settings: Settings,
        registry: SongRegistry,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.registry = registry
        self.suno = SunoClient(settings, transport) if settings.live_generation else None
        # Hold references to watcher tasks so they aren't garbage-collected
        self._watchers: set[asyncio.Task] = set()
        self._lyrics: dict[str, TimestampedLyrics | None] = {}

    @property
    def live(self) -> bool:
        return self.suno is not None

    def _require_live(self) -> SunoClient:
        if self.suno is None:
            raise ConfigurationError("SUNO_API_KEY not configured")
        return self.suno

    async def submit(
        self,
        file_url: str,
        style: str,
        prompt: str | None = None,
        require_live: bool = False,
    ) -> Submission:
        """Start a generation.

        Returns a LiveSubmission carrying the provider taskId when the live
        call was accepted, or a MockSubmission with an already complete task
        when no key is configured or the provider rejected the request.
        UnreachableInputError is not caught: a mock cannot help there.
        """
        if self.suno is None:
            if require_live:
                raise ConfigurationError("SUNO_API_KEY not configured")
            logger.info("No Suno key configured, using mock generation")
            return await self._mock(file_url, style, prompt)

        try:
            task_id = await self.suno.submit(file_url, style, prompt)
        except ProviderSubmissionError as e:
            if require_live:
                raise
            logger.error(f"Real Suno API failed, falling back to mock: {e}")
            return await self._mock(file_url, style, prompt)
        return LiveSubmission(task_id=task_id)

    async def _mock(self, file_url: str, style: str, prompt: str | None) -> MockSubmission:
        task = await generate_mock(file_url, style, prompt, delay=self.settings.mock_delay_seconds)
        return MockSubmission(task=task)

    async def poll_status(self, task_id: str) -> GenerationTask:
        return await self._require_live().poll_status(task_id)

    async def await_completion(
        self,
        task_id: str,
        max_attempts: int | None = None,
        interval: float | None = None,
    ) -> GenerationTask:
        return await self._require_live().await_completion(task_id, max_attempts, interval)

    async def fetch_lyrics(
        self,
        task_id: str,
        audio_id: str | None = None,
        music_index: int = 0,
    ) -> TimestampedLyrics | None:
        if self.suno is None:
            logger.warning("SUNO_API_KEY not configured, skipping lyrics")
            return None
        return await self.suno.fetch_lyrics(task_id, audio_id, music_index)

    async def lyrics_for(self, task: GenerationTask) -> TimestampedLyrics | None:
        """Lyrics for a completed task, asking the provider at most once."""
        song = self.registry.find_by_task(task.task_id)
        if song is not None and song.lyrics is not None:
            return song.lyrics
        if task.task_id in self._lyrics:
            return self._lyrics[task.task_id]
        if not task.audio_id:
            return None

        # Claimed before the await; concurrent polls see the claim
        self._lyrics[task.task_id] = None
        lyrics = await self.fetch_lyrics(task.task_id, task.audio_id)
        self._lyrics[task.task_id] = lyrics
        return lyrics

    def record_completion(
        self,
        song_id: str,
        task: GenerationTask,
        lyrics: TimestampedLyrics | None = None,
    ) -> None:
        """Copy a finished task's output onto its Song."""
        if not task.audio_url:
            return
        self.registry.set_output(song_id, task.audio_url)
        self.registry.merge_metadata(
            song_id,
            {
                "title": task.metadata.title,
                "tags": task.metadata.tags,
                "duration": task.metadata.duration,
            },
        )
        if lyrics is not None:
            self.registry.set_lyrics(song_id, lyrics)

    async def _watch(self, task_id: str, song_id: str) -> None:
        try:
            task = await self.await_completion(task_id)
        except (GenerationFailedError, PollingTimeoutError) as e:
            logger.error(f"Generation {task_id} for song {song_id} failed: {e}")
            self.registry.merge_metadata(song_id, {"error": str(e)})
            return
        except Exception:
            logger.exception(f"Watcher failed for task {task_id}")
            return

        lyrics = await self.lyrics_for(task)
        self.record_completion(song_id, task, lyrics)
        logger.info(f"Song {song_id} ready: {task.audio_url}")

    def watch(self, task_id: str, song_id: str) -> asyncio.Task:
        """Track a live task in the background until it finishes."""
        task = asyncio.create_task(self._watch(task_id, song_id))
        self._watchers.add(task)
        task.add_done_callback(self._watchers.discard)
        return task

    async def shutdown(self) -> None:
        """Stop polling. The provider keeps running; this only stops watching."""
        watchers = list(self._watchers)
        for task in watchers:
            task.cancel()
        if watchers:
            logger.info(f"Cancelled {len(watchers)} generation watchers")
            await asyncio.gather(*watchers, return_exceptions=True)
