# patient_ui/utils/config.py
from __future__ import annotations

import functools
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# ---------- Enums ----------

class BrowserType(str, Enum):
    chromium = "chromium"
    firefox = "firefox"
    webkit = "webkit"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# ---------- Settings ----------

class Settings(BaseSettings):
    """
    Process-wide defaults for patient element resolution.

    Values load in this order of precedence:
      1) Environment variables
      2) .env file in project root
      3) Defaults below

    These only seed `PatientConfig.from_settings()`; a config built in code
    never reads the environment.
    """

    # ---- Patience ----
    PRESENT_TIMEOUT_MS: int = Field(default=30000, ge=0, description="How long to wait for an element to appear")
    NOT_PRESENT_TIMEOUT_MS: int = Field(default=10000, ge=0, description="How long to wait for an element to go away")
    POLL_INTERVAL_MS: int = Field(default=500, ge=0)
    MAX_POLL_INTERVAL_MS: int = Field(default=500, ge=0)
    POLL_BACKOFF_FACTOR: float = Field(default=1.0, ge=1.0, description="1.0 = fixed delay between polls")

    # ---- Retry & error handling ----
    MAX_ACTION_ATTEMPTS: int = Field(default=3, ge=1)

    # ---- Browser (CLI check / Playwright session) ----
    HEADLESS: bool = Field(default=True, description="Run the browser headless")
    BROWSER_TYPE: BrowserType = Field(default=BrowserType.chromium, description="Playwright browser")
    PAGE_LOAD_TIMEOUT: int = Field(default=60000, ge=1000)

    # ---- Logging ----
    LOG_LEVEL: LogLevel = Field(default=LogLevel.INFO)
    LOG_TO_FILE: bool = Field(default=False)
    LOG_FILE: Path = Field(default=Path("./patient-ui.log"))
    COLORIZED_OUTPUT: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # ignore unknown envs to keep things flexible
    )

    @field_validator("LOG_FILE", mode="before")
    @classmethod
    def _coerce_to_path(cls, v):
        if isinstance(v, Path):
            return v
        return Path(str(v)) if v is not None else v

    @field_validator("LOG_FILE", mode="after")
    @classmethod
    def _absolutize_log_file(cls, v: Path, info):
        return v if v.is_absolute() else Path.cwd() / v

    @field_validator("MAX_POLL_INTERVAL_MS")
    @classmethod
    def _max_interval_floor(cls, v: int, info):
        # never below the base interval
        base = info.data.get("POLL_INTERVAL_MS")
        return v if base is None else max(v, base)

    # Convenience: Playwright launch options dict
    def playwright_launch_kwargs(self, headless: Optional[bool] = None) -> dict:
        return {"headless": self.HEADLESS if headless is None else headless}


# --------- Public accessor (memoized) ---------

@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load and cache settings once per process.
    Call `get_settings.cache_clear()` if you need to reload after changing env.
    """
    return Settings()
