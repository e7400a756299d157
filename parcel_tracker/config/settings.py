"""Application settings for the parcel store.

Environment variables are loaded from a ``.env`` file using ``python-dotenv``
and exposed through a Pydantic settings object.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

# Load environment variables from a .env file if present
load_dotenv()

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
DEFAULT_DB_PATH = Path("data") / "tracker.db"
DEFAULT_DB_TIMEOUT = 5.0  # seconds
DEFAULT_LOG_FILE = Path("logs") / "app.log"
DEFAULT_LOG_LEVEL = "INFO"
MEMORY_DB = ":memory:"


class Settings(BaseModel):
    """Immutable settings object used across the application."""

    db_path: str = str(DEFAULT_DB_PATH)
    db_timeout: float = Field(default=DEFAULT_DB_TIMEOUT, ge=0)
    log_file: Path = DEFAULT_LOG_FILE
    log_level: str = DEFAULT_LOG_LEVEL

    model_config = ConfigDict(frozen=True)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def in_memory(self) -> bool:
        return self.db_path == MEMORY_DB


def _build_settings() -> Settings:
    """Construct the ``Settings`` instance based on environment variables."""

    values: dict[str, object] = {}
    db_path = os.getenv("PARCEL_DB_PATH")
    if db_path:
        values["db_path"] = db_path
    timeout = os.getenv("PARCEL_DB_TIMEOUT")
    if timeout:
        values["db_timeout"] = timeout
    log_file = os.getenv("PARCEL_LOG_FILE")
    if log_file:
        values["log_file"] = log_file
    log_level = os.getenv("PARCEL_LOG_LEVEL")
    if log_level:
        values["log_level"] = log_level

    try:
        return Settings(**values)
    except ValidationError as exc:
        raise RuntimeError(f"Invalid parcel store configuration: {exc}") from exc


# Public settings instance
settings = _build_settings()
