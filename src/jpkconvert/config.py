"""Configuration management for jpk-convert."""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from .transform.models import TransformOptions

load_dotenv()


def _parse_cors_origins() -> list[str]:
    """Parse CORS origins from environment variable."""
    cors_env = os.getenv("CORS_ALLOW_ORIGINS")
    if cors_env:
        return cors_env.split(",")
    return ["*"]


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes", "on")


class Settings(BaseModel):
    """Application settings."""

    # Transform defaults
    decimal_places: int = int(os.getenv("DECIMAL_PLACES", "2"))
    allow_future_dates: bool = _env_flag("ALLOW_FUTURE_DATES")

    # Pipeline defaults
    skip_validation: bool = _env_flag("SKIP_VALIDATION")
    sample_rows: int = int(os.getenv("SAMPLE_ROWS", "10"))  # Rows sampled per column for type inference

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Server settings
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    debug: bool = _env_flag("DEBUG")

    # CORS settings (comma-separated list of allowed origins, or * for all)
    cors_allow_origins: list[str] = _parse_cors_origins()

    # Upper bound for uploaded file bodies
    max_upload_bytes: int = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))

    # Default source system when a file carries no metadata
    default_system: Optional[str] = os.getenv("DEFAULT_SYSTEM")

    def transform_options(self) -> TransformOptions:
        """Build transform options from the configured defaults."""
        return TransformOptions(
            decimal_places=self.decimal_places,
            allow_future_dates=self.allow_future_dates,
        )


settings = Settings()
