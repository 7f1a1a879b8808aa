from __future__ import annotations

import pathlib
from datetime import datetime
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Manages application configuration loaded from the environment or a .env file.

    Every field can be overridden with a LUNACAL_ prefixed variable, e.g.
    LUNACAL_DISPLAY_TIMEZONE=Europe/Oslo. Complex values such as
    DISPLAY_MONTHS are given as JSON: '[[0, 2026], [1, 2026]]'.
    """

    model_config = SettingsConfigDict(
        env_prefix="LUNACAL_", env_file=".env", env_file_encoding="utf-8"
    )

    # --- Core Config ---
    DATA_DIR: pathlib.Path = pathlib.Path.home() / ".lunacal"
    # Follows DATA_DIR unless set explicitly
    LOG_PATH: pathlib.Path = DATA_DIR / "logs/lunacal.log"

    # --- Web Config ---
    SERVER_PORT: int = 8080
    SERVER_HOST: str = "0.0.0.0"

    # --- Display Config ---
    DISPLAY_TIMEZONE: str = "Asia/Kolkata"
    # (month_index, year) pairs, month_index is zero-based (6 = July)
    DISPLAY_MONTHS: List[Tuple[int, int]] = [
        (6, 2025),
        (7, 2025),
        (8, 2025),
        (9, 2025),
        (10, 2025),
        (11, 2025),
    ]
    CLOCK_INTERVAL_SECONDS: float = 1.0

    # Pin the highlighted "today" for demos; the clock keeps real time.
    SIMULATED_TODAY: Optional[datetime] = None

    @field_validator("DISPLAY_TIMEZONE")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone '{value}'") from e
        return value

    @field_validator("DISPLAY_MONTHS")
    @classmethod
    def _check_months(cls, value: List[Tuple[int, int]]) -> List[Tuple[int, int]]:
        for month_index, year in value:
            if not 0 <= month_index <= 11:
                raise ValueError(
                    f"Month index {month_index} out of range (expected 0-11)"
                )
            # Years 1 and 9999 can fall off the UTC timeline at local midnight
            if not 2 <= year <= 9998:
                raise ValueError(f"Year {year} out of range (expected 2-9998)")
        return value

    @model_validator(mode="after")
    def _derive_log_path(self) -> "Settings":
        if "LOG_PATH" not in self.model_fields_set:
            self.LOG_PATH = self.DATA_DIR / "logs/lunacal.log"
        return self

    @property
    def display_tz(self) -> ZoneInfo:
        return ZoneInfo(self.DISPLAY_TIMEZONE)


# Create a single, globally accessible settings instance
settings = Settings()
