import asyncio
import logging
import re

import httpx
from pydantic import BaseModel

from vocalremix.config import Settings
from vocalremix.services.suno import resolve_audio_url

logger = logging.getLogger(__name__)

# First match wins
MOOD_PATTERNS: list[tuple[str, re.Pattern]] = [
    ("happy", re.compile(r"happy|joy|excited|fun|celebrate")),
    ("sad", re.compile(r"sad|lonely|cry|miss|lost")),
    ("angry", re.compile(r"angry|mad|hate|fight")),
    ("calm", re.compile(r"calm|peace|relax|quiet")),
    ("romantic", re.compile(r"love|heart|romance")),
]

# Key and BPM detection are not implemented; these are placeholders.
PLACEHOLDER_KEY = "C major"
PLACEHOLDER_BPM = 120.0


class AudioAnalysis(BaseModel):
    transcription: str
    key: str | None = None
    bpm: float | None = None
    mood: str | None = None
    duration: float | None = None


def infer_mood(text: str) -> str:
    lower = text.lower()
    for mood, pattern in MOOD_PATTERNS:
        if pattern.search(lower):
            return mood
    return "neutral"


class AudioAnalyzer:
    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self._transport = transport

    async def transcribe(self, file_url: str) -> str:
        """Download the audio and transcribe it with Whisper."""
        url = resolve_audio_url(file_url, self.settings.public_base_url)
        timeout = self.settings.transcription_timeout
        async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
            audio = await client.get(url, follow_redirects=True)
            audio.raise_for_status()

            resp = await client.post(
                f"{self.settings.openai_base_url}/audio/transcriptions",
                headers={"Authorization": f"Bearer {self.settings.openai_api_key}"},
                data={"model": "whisper-1", "response_format": "text"},
                files={"file": ("audio.mp3", audio.content, "audio/mpeg")},
            )
            resp.raise_for_status()
            return resp.text.strip()

    async def analyze(self, file_url: str) -> AudioAnalysis:
        transcription = await self.transcribe(file_url)
        return AudioAnalysis(
            transcription=transcription,
            mood=infer_mood(transcription),
            key=PLACEHOLDER_KEY,
            bpm=PLACEHOLDER_BPM,
        )

    async def analyze_mock(self, file_url: str) -> AudioAnalysis:
        await asyncio.sleep(self.settings.analysis_mock_delay_seconds)
        return AudioAnalysis(
            transcription="This is a sample transcription of the audio content.",
            key=PLACEHOLDER_KEY,
            bpm=PLACEHOLDER_BPM,
            mood="happy",
            duration=180.0,
        )

    async def run(self, file_url: str) -> AudioAnalysis:
        """Analyze with Whisper when a key is configured, otherwise (or on failure) mock."""
        if not self.settings.live_analysis:
            logger.info("Using mock mode for audio analysis")
            return await self.analyze_mock(file_url)
        try:
            return await self.analyze(file_url)
        except httpx.HTTPError as e:
            logger.warning(f"Whisper API failed, falling back to mock mode: {e}")
            return await self.analyze_mock(file_url)
