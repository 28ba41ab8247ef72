from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    upload_dir: Path = Path("./storage/uploads")
    frontend_url: str = "http://localhost:3000"
    # Base used to turn "/uploads/..." into a URL the music provider can fetch
    public_base_url: str = "http://localhost:8000"

    suno_api_key: str = ""
    suno_base_url: str = "https://api.sunoapi.org/api/v1"
    suno_callback_url: str = "https://api.example.com/callback"
    suno_model: str = "V4_5PLUS"

    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"

    max_upload_bytes: int = 25 * 1024 * 1024

    poll_interval_seconds: float = 5.0
    poll_max_attempts: int = 60
    mock_delay_seconds: float = 2.0
    analysis_mock_delay_seconds: float = 1.0

    probe_timeout: float = 10.0
    submit_timeout: float = 60.0
    status_timeout: float = 30.0
    lyrics_timeout: float = 30.0
    transcription_timeout: float = 120.0

    watch_in_background: bool = True

    model_config = {"env_file": "../.env", "env_file_encoding": "utf-8"}

    @property
    def live_generation(self) -> bool:
        return bool(self.suno_api_key.strip())

    @property
    def live_analysis(self) -> bool:
        return bool(self.openai_api_key.strip())


settings = Settings()
