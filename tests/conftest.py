"""Pytest configuration and shared fixtures for WinterArc tests.

Provides a throwaway SQLite database, a repository and tracker wired to a fixed
clock, and factories for in-memory habits and entries.
"""

from __future__ import annotations

import logging
import tempfile
from datetime import date, datetime, time
from pathlib import Path

import pytest
from sqlmodel import SQLModel, create_engine

from winterarc.infra.database import create_session_factory
from winterarc.infra.repositories import SQLModelHabitRepository
from winterarc.models import DailyEntry, Habit
from winterarc.services.calendar import CalendarConfig, FixedClock
from winterarc.services.tracker import HabitTracker

TODAY = date(2025, 1, 7)


@pytest.fixture(autouse=True)
def _reset_winterarc_logging():
    """Drop handlers installed by setup_logging so tests do not share streams."""

    yield
    logger = logging.getLogger("winterarc")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching what the repository expects."""

    return create_session_factory(db_engine)


@pytest.fixture
def habit_repo(session_factory) -> SQLModelHabitRepository:
    return SQLModelHabitRepository(session_factory)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(TODAY)


@pytest.fixture
def tracker(habit_repo, clock) -> HabitTracker:
    return HabitTracker(habit_repo, clock=clock, calendar_config=CalendarConfig())


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def habit_factory():
    """Factory for in-memory habits.

    Returns:
        Callable: Function that builds Habit instances (not persisted)
    """

    def _create_habit(name: str = "Read", created: date = date(2025, 1, 1), at: time = time(9, 30)) -> Habit:
        """Create a habit created on ``created`` at time-of-day ``at``."""
        return Habit(name=name, created_at=datetime.combine(created, at))

    return _create_habit


@pytest.fixture
def entry_factory():
    """Factory for in-memory daily entries.

    Returns:
        Callable: Function that builds DailyEntry instances (not persisted)
    """

    def _create_entry(day: date, statuses: dict[str, bool] | None = None) -> DailyEntry:
        return DailyEntry(entry_date=day, habit_statuses=dict(statuses or {}))

    return _create_entry


@pytest.fixture
def history(entry_factory):
    """Build one entry per day from a start date and a list of statuses for one habit.

    ``None`` in the flags list skips that day (no entry).
    """

    def _history(habit: Habit, start: date, flags: list[bool | None]) -> list[DailyEntry]:
        rows = []
        for offset, flag in enumerate(flags):
            if flag is None:
                continue
            day = date.fromordinal(start.toordinal() + offset)
            rows.append(entry_factory(day, {habit.id: flag}))
        return rows

    return _history
