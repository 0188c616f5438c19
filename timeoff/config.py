import os
from functools import lru_cache
from pathlib import Path
from typing import Tuple

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent


class DailyWindow(BaseModel):
    """Clock hours a full-day request occupies on each day it covers."""

    start_hour: int = Field(default=8, ge=0, le=23)
    end_hour: int = Field(default=16, ge=1, le=24)

    @model_validator(mode="after")
    def check_order(self) -> "DailyWindow":
        if self.end_hour <= self.start_hour:
            raise ValueError("daily window end_hour must be after start_hour")
        return self


class Settings(BaseSettings):
    env: str = Field(default="dev", description="Deployment environment")
    log_level: str = "INFO"
    sentry_dsn: str | None = Field(default=None, description="Sentry DSN for error monitoring")

    data_path: Path = Field(default=Path("data/store.json"), description="JSON record store location")
    roster_source: str | None = Field(default=None, description="Roster JSON file path or http(s) URL")
    roster_timeout: float = 10.0
    shared_password: str = "Marina1"
    admin_name: str = Field(default="Haak Wagner", description="Employee who signs in as administrator")

    timezone: str = "America/Los_Angeles"
    daily_window: DailyWindow = Field(default_factory=DailyWindow)
    hours_per_full_day: float = 8.0
    min_partial_hours: float = 0.5
    pto_lead_days: int = 14
    summer_cap_days: int = 3
    summer_start: Tuple[int, int] = (6, 1)
    summer_end: Tuple[int, int] = (9, 30)
    sick_verification_days: int = 3

    model_config = SettingsConfigDict(env_prefix="TIMEOFF_", env_nested_delimiter="__", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings(_env_file=get_settings_env_file())


def get_settings_env_file() -> str | None:
    """Resolve environment-specific env file if it exists."""
    env = os.getenv("TIMEOFF_ENV", "dev")
    env_file = BASE_DIR / f".env.{env}"
    default_file = BASE_DIR / ".env"
    if env_file.exists():
        return str(env_file)
    if default_file.exists():
        return str(default_file)
    return None
