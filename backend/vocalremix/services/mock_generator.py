import asyncio
import logging
import time

from vocalremix.models.generation import GenerationStatus, GenerationTask, TrackMetadata

logger = logging.getLogger(__name__)

MOCK_DURATION = 180.0


async def generate_mock(
    file_url: str,
    style: str,
    prompt: str | None = None,
    delay: float = 2.0,
) -> GenerationTask:
    """Stand-in generation: echoes the input audio back as the output."""
    logger.info(f"Mock mode: simulating generation for {file_url} ({style})")
    await asyncio.sleep(delay)

    return GenerationTask(
        task_id=f"mock_{int(time.time() * 1000)}",
        status=GenerationStatus.complete,
        audio_url=file_url,
        metadata=TrackMetadata(
            title=f"{style} Remix (Mock)",
            tags=[style, "ai-generated", "mock"],
            duration=MOCK_DURATION,
        ),
    )
