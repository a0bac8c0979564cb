"""
Application configuration using Pydantic Settings.

Automatically loads environment variables from .env files. The settings
object is frozen: it is built once and passed into the services.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # OpenAI
    openai_api_key: str | None = None
    openai_model: str = "gpt-4.1"
    inference_timeout: float = Field(default=120.0, gt=0)
    max_output_tokens: int = Field(default=4096, ge=1)

    # Upload and extraction limits
    max_file_size: int = Field(default=10 * 1024 * 1024, ge=1)
    max_text_chars: int = Field(default=50_000, ge=1)

    # Storage
    upload_dir: Path = Path("uploads")
    output_dir: Path = Path("output")

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    # Debug flags
    debug: bool = False

    model_config = SettingsConfigDict(
        # Load from .env file in the package directory
        env_file=Path(__file__).parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
        # Case insensitive environment variable names
        case_sensitive=False,
        frozen=True,
    )

    @property
    def inference_configured(self) -> bool:
        """Whether an API key is available for inference calls."""
        return bool(self.openai_api_key)

    def ensure_directories(self) -> None:
        """Create the upload and output directories if missing."""
        for directory in (self.upload_dir, self.output_dir):
            directory.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application configuration loaded from environment.
    """
    return Settings()
