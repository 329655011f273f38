"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .config import BaseConfig
from .infra.database import create_db_engine, create_session_factory, init_database
from .infra.repositories import SQLModelHabitRepository
from .services.calendar import CalendarConfig, Clock, SystemClock
from .services.tracker import HabitTracker


@dataclass
class AppContext:
    """Centralized application context with services and configuration."""

    config: BaseConfig
    session_factory: Callable
    habit_repo: SQLModelHabitRepository
    clock: Clock
    calendar_config: CalendarConfig
    tracker: HabitTracker


def create_app_context(config: Optional[BaseConfig] = None, *, clock: Optional[Clock] = None) -> AppContext:
    """Create and initialize the application context."""

    if config is None:
        config = BaseConfig()

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)

    habit_repo = SQLModelHabitRepository(session_factory)
    clock = clock or SystemClock()
    calendar_config = config.calendar_config()

    return AppContext(
        config=config,
        session_factory=session_factory,
        habit_repo=habit_repo,
        clock=clock,
        calendar_config=calendar_config,
        tracker=HabitTracker(habit_repo, clock=clock, calendar_config=calendar_config),
    )
