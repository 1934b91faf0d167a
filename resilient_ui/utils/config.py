# resilient_ui/utils/config.py
from __future__ import annotations

import functools
from enum import Enum
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# ---------- Enums ----------

class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# ---------- Settings ----------

class Settings(BaseSettings):
    """
    Central configuration for element resolution and retries.

    Values load in this order of precedence:
      1) Environment variables
      2) .env file in project root
      3) Defaults below
    """

    # ---- Element resolution ----
    RESOLVE_TIMEOUT_MS: int = Field(default=8000, ge=0, description="Per-descriptor polling budget")
    POLL_BACKOFF_STEP_MS: int = Field(default=300, ge=0, description="Linear poll spacing (attempt x step)")
    ACTION_TIMEOUT_MS: int = Field(default=15000, ge=0, description="Default timeout for page actions")

    # ---- Retry & backoff ----
    RETRY_MAX_RETRIES: int = Field(default=3, ge=0)
    RETRY_BASE_DELAY_MS: int = Field(default=1000, ge=0)
    RETRY_MAX_DELAY_MS: int = Field(default=10000, ge=0)
    RETRY_BACKOFF_MULTIPLIER: float = Field(default=2.0, ge=1.0)
    RETRY_JITTER_RATIO: float = Field(default=0.25, ge=0.0, lt=1.0)

    # ---- Diagnostics ----
    ARTIFACTS_DIR: Path = Field(default=Path("./test-results"))
    CAPTURE_ON_FAILURE: bool = Field(default=True)
    FULL_PAGE_SCREENSHOT: bool = Field(default=True)

    # ---- Locator registry ----
    LOCATORS_FILE: Path = Field(default=Path("./data/locators.json"))

    # ---- Logging ----
    LOG_LEVEL: LogLevel = Field(default=LogLevel.INFO)
    LOG_TO_FILE: bool = Field(default=False)
    LOG_FILE: Path = Field(default=Path("./test-results/resilient-ui.log"))
    COLORIZED_OUTPUT: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("ARTIFACTS_DIR", "LOCATORS_FILE", "LOG_FILE", mode="before")
    @classmethod
    def _coerce_to_path(cls, v):
        if isinstance(v, Path):
            return v
        return Path(str(v)) if v is not None else v

    @field_validator("ARTIFACTS_DIR", "LOCATORS_FILE", "LOG_FILE", mode="after")
    @classmethod
    def _absolutize(cls, v: Path):
        return v if v.is_absolute() else Path.cwd() / v

    @field_validator("RETRY_MAX_DELAY_MS")
    @classmethod
    def _max_delay_floor(cls, v: int, info):
        base = info.data.get("RETRY_BASE_DELAY_MS")
        if base is not None and v < base:
            raise ValueError("RETRY_MAX_DELAY_MS must be >= RETRY_BASE_DELAY_MS")
        return v

    def ensure_dirs(self) -> None:
        """Create required directories (idempotent)."""
        for p in {self.ARTIFACTS_DIR, self.LOG_FILE.parent}:
            p.mkdir(parents=True, exist_ok=True)


# --------- Public accessor (memoized) ---------

@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load and cache settings once per process.
    Call `get_settings.cache_clear()` if you need to reload after changing env.
    """
    s = Settings()
    s.ensure_dirs()
    return s
