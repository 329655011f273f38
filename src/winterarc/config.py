"""Application configuration objects and helpers."""

from __future__ import annotations

import calendar
import os
from datetime import date
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from sqlalchemy.pool import StaticPool

from .services.calendar import CalendarConfig

load_dotenv()

_WEEKDAYS = {name.lower(): index for index, name in enumerate(calendar.day_name)}


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_weekday(value: str) -> int:
    """Map a weekday name (``monday``..``sunday``) to its calendar index."""

    try:
        return _WEEKDAYS[value.strip().lower()]
    except KeyError as exc:
        raise ValueError(f"Unknown weekday for WINTERARC_FIRST_WEEKDAY: {value!r}") from exc


def _parse_month(value: str) -> date:
    """Parse ``YYYY-MM`` into the first day of that month."""

    try:
        year, month = (int(part) for part in value.strip().split("-"))
        return date(year, month, 1)
    except ValueError as exc:
        raise ValueError(f"Expected YYYY-MM for WINTERARC_CALENDAR_EPOCH, got {value!r}") from exc


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "WinterArc"
    DB_FILENAME = "winterarc.db"

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("WINTERARC_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("WINTERARC_DATABASE_URL", self._build_sqlite_url())
        self.FIRST_WEEKDAY = _parse_weekday(os.getenv("WINTERARC_FIRST_WEEKDAY", "monday"))
        self.CALENDAR_EPOCH = _parse_month(os.getenv("WINTERARC_CALENDAR_EPOCH", "2024-12"))

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("WINTERARC_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        return f"sqlite:///{self.DATA_DIR / self.DB_FILENAME}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL in {"sqlite://", "sqlite:///:memory:"}:
            # single shared connection, otherwise each session opens an empty database
            return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {}

    def calendar_config(self) -> CalendarConfig:
        """Build the calendar conventions handed to the history engine."""

        return CalendarConfig(first_weekday=self.FIRST_WEEKDAY, epoch_month=self.CALENDAR_EPOCH)


class TestingConfig(BaseConfig):
    """Configuration for the test suite: in-memory database unless overridden."""

    def __init__(self) -> None:
        super().__init__()
        self.DATABASE_URL = os.getenv("WINTERARC_TEST_DATABASE_URL", "sqlite://")
