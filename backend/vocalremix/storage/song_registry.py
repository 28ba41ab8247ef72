import itertools
import logging
import secrets
import string
import threading
import time
from datetime import UTC, datetime
from typing import Any

from vocalremix.models.generation import TimestampedLyrics
from vocalremix.models.song import Song

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_song_id() -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"{int(time.time() * 1000)}_{suffix}"


class SongRegistry:
    """In-memory store of generated songs. Lives as long as the process."""

    def __init__(self) -> None:
        self._songs: dict[str, Song] = {}
        self._order: dict[str, int] = {}
        self._seq = itertools.count()
        self._lock = threading.Lock()

    def create(
        self,
        input_url: str,
        style: str,
        prompt: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Song:
        song = Song(
            id=new_song_id(),
            input_url=input_url,
            style=style,
            prompt=prompt,
            metadata=dict(metadata or {}),
            created_at=datetime.now(UTC).isoformat(),
        )
        with self._lock:
            self._songs[song.id] = song
            self._order[song.id] = next(self._seq)
        return song

    def get(self, song_id: str) -> Song | None:
        with self._lock:
            song = self._songs.get(song_id)
            return song.model_copy(deep=True) if song is not None else None

    def set_output(self, song_id: str, output_url: str) -> Song | None:
        """Record the generated audio. Unknown ids are ignored, the first URL wins."""
        with self._lock:
            song = self._songs.get(song_id)
            if song is None:
                logger.info(f"set_output for unknown song {song_id}, ignoring")
                return None
            if song.output_url is None:
                song.output_url = output_url
            elif song.output_url != output_url:
                logger.warning(f"Song {song_id} already has output {song.output_url}")
            return song.model_copy(deep=True)

    def attach_task(self, song_id: str, task_id: str) -> Song | None:
        with self._lock:
            song = self._songs.get(song_id)
            if song is not None:
                song.task_id = task_id
            return song.model_copy(deep=True) if song is not None else None

    def find_by_task(self, task_id: str) -> Song | None:
        with self._lock:
            for song in self._songs.values():
                if song.task_id == task_id:
                    return song.model_copy(deep=True)
        return None

    def merge_metadata(self, song_id: str, metadata: dict[str, Any]) -> Song | None:
        with self._lock:
            song = self._songs.get(song_id)
            if song is not None:
                song.metadata = {**song.metadata, **metadata}
            return song.model_copy(deep=True) if song is not None else None

    def set_lyrics(self, song_id: str, lyrics: TimestampedLyrics) -> Song | None:
        with self._lock:
            song = self._songs.get(song_id)
            if song is not None and song.lyrics is None:
                song.lyrics = lyrics
            return song.model_copy(deep=True) if song is not None else None

    def list_all(self) -> list[Song]:
        """Return all songs sorted by creation time (newest first)."""
        with self._lock:
            songs = [s.model_copy(deep=True) for s in self._songs.values()]
            order = dict(self._order)
        songs.sort(key=lambda s: (s.created_at, order[s.id]), reverse=True)
        return songs

    def clear(self) -> None:
        with self._lock:
            self._songs.clear()
            self._order.clear()

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "total_songs": len(self._songs),
                "completed_songs": sum(1 for s in self._songs.values() if s.output_url),
            }
