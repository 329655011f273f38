"""SQLModel implementation of the habit repository."""

from __future__ import annotations

from typing import Callable, ContextManager, Iterable, Optional

from sqlmodel import Session, select

from ...logging_config import get_logger
from ...models.habit import DailyEntry, Habit
from ...services.entries import strip_habit

logger = get_logger(__name__)


class SQLModelHabitRepository:
    """SQLModel-based habit and daily entry repository.

    Every method runs in its own session, so a batch either commits whole or
    rolls back whole. Returned rows are detached snapshots.
    """

    def __init__(self, session_factory: Callable[[], ContextManager[Session]]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    # Habit operations
    def list_habits(self) -> list[Habit]:
        with self.session_factory() as session:
            rows = list(session.exec(select(Habit).order_by(Habit.created_at, Habit.name)).all())
            session.expunge_all()
            return rows

    def get_habit(self, habit_id: str) -> Optional[Habit]:
        with self.session_factory() as session:
            obj = session.get(Habit, habit_id)
            if obj:
                session.expunge(obj)
            return obj

    def create_habit(self, habit: Habit) -> Habit:
        with self.session_factory() as session:
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            logger.info("Habit created", extra={"habit_id": habit.id, "habit_name": habit.name})
            return habit

    def delete_habit(self, habit_id: str) -> None:
        """Delete the habit and remove its key from every entry in one transaction."""
        with self.session_factory() as session:
            habit = session.get(Habit, habit_id)
            rows = {entry.id: entry for entry in session.exec(select(DailyEntry)).all()}
            stripped = strip_habit(rows.values(), habit_id)
            for copy in stripped:
                rows[copy.id].habit_statuses = copy.habit_statuses
                session.add(rows[copy.id])
            if habit:
                session.delete(habit)
            session.commit()
            logger.info("Habit deleted", extra={"habit_id": habit_id, "entries_stripped": len(stripped)})

    # Daily entry operations
    def list_entries(self) -> list[DailyEntry]:
        with self.session_factory() as session:
            rows = list(session.exec(select(DailyEntry).order_by(DailyEntry.entry_date)).all())
            session.expunge_all()
            return rows

    def insert_entries(self, batch: Iterable[DailyEntry]) -> list[DailyEntry]:
        batch = list(batch)
        if not batch:
            return []
        with self.session_factory() as session:
            session.add_all(batch)
            session.commit()
            for entry in batch:
                session.refresh(entry)
            session.expunge_all()
            logger.debug("Entries inserted", extra={"count": len(batch)})
            return batch

    def update_entry(self, entry: DailyEntry) -> DailyEntry:
        with self.session_factory() as session:
            existing = session.get(DailyEntry, entry.id)
            if existing is None:
                raise ValueError(f"Daily entry {entry.id} does not exist")
            # Fresh dict so the JSON column is flagged as changed.
            existing.habit_statuses = dict(entry.habit_statuses or {})
            session.add(existing)
            session.commit()
            session.refresh(existing)
            session.expunge(existing)
            return existing

    def delete_entry(self, entry_id: str) -> None:
        with self.session_factory() as session:
            entry = session.get(DailyEntry, entry_id)
            if entry:
                session.delete(entry)
                session.commit()
                logger.info("Entry deleted", extra={"entry_id": entry_id})


__all__ = ["SQLModelHabitRepository"]
