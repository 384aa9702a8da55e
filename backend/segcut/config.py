"""Application configuration."""
import tempfile
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App settings
    app_name: str = "SegCut"
    debug: bool = False

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000

    # FFmpeg settings
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"

    # Scratch files for per-segment extracts and concat manifests
    scratch_dir: Path = Path(tempfile.gettempdir()) / "segcut"

    # Gemini video analysis
    google_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    gemini_temperature: float = 0.2
    gemini_max_output_tokens: int = 1024
    analysis_timeout_seconds: float = 60.0
    max_inline_video_mb: int = 20

    # Frontend
    frontend_url: str = "http://localhost:5173"


settings = Settings()
