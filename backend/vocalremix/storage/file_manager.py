import re
import time
from pathlib import Path

from vocalremix.config import Settings
from vocalremix.errors import UploadRejected

SUPPORTED_FORMATS = {
    "audio/wav",
    "audio/x-wav",
    "audio/mpeg",
    "audio/mp3",
    "audio/ogg",
    "audio/webm",
}
SUPPORTED_EXTENSIONS = {".wav", ".mp3", ".ogg", ".webm"}

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def safe_file_name(name: str) -> str:
    name = Path(name).name
    return _UNSAFE_CHARS.sub("_", name) or "recording.webm"


class FileManager:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @property
    def upload_dir(self) -> Path:
        d = self.settings.upload_dir
        d.mkdir(parents=True, exist_ok=True)
        return d

    def upload_path(self, file_name: str) -> Path:
        return self.upload_dir / file_name

    def validate(self, file_name: str, content_type: str | None, size: int) -> None:
        if size == 0:
            raise UploadRejected("No audio file provided")
        if size > self.settings.max_upload_bytes:
            limit_mb = self.settings.max_upload_bytes // (1024 * 1024)
            raise UploadRejected(f"File too large. Maximum size is {limit_mb}MB.")

        # Recorders send e.g. "audio/webm;codecs=opus"
        media_type = (content_type or "").split(";")[0].strip().lower()
        if media_type and media_type != "application/octet-stream":
            ok = media_type in SUPPORTED_FORMATS
        else:
            ok = Path(file_name).suffix.lower() in SUPPORTED_EXTENSIONS
        if not ok:
            raise UploadRejected("Unsupported audio format. Please use WAV, MP3, OGG, or WebM.")

    def save_upload(self, file_name: str, content_type: str | None, content: bytes) -> tuple[str, str]:
        """Validate and store an upload. Returns (public URL path, stored file name)."""
        self.validate(file_name, content_type, len(content))
        stored_name = f"audio_{int(time.time() * 1000)}_{safe_file_name(file_name)}"
        self.upload_path(stored_name).write_bytes(content)
        return f"/uploads/{stored_name}", stored_name
