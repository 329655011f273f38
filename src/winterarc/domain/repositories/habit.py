"""Habit repository protocol."""

from __future__ import annotations

from typing import Iterable, Optional, Protocol

from ...models.habit import DailyEntry, Habit


class HabitRepository(Protocol):
    """Persistence surface the history engine reads from and writes to."""

    def list_habits(self) -> list[Habit]:
        """Snapshot of all habits, oldest first."""
        ...

    def get_habit(self, habit_id: str) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        ...

    def create_habit(self, habit: Habit) -> Habit:
        """Persist a new habit."""
        ...

    def delete_habit(self, habit_id: str) -> None:
        """Delete a habit and strip its status from every entry."""
        ...

    def list_entries(self) -> list[DailyEntry]:
        """Snapshot of all daily entries, ordered by date."""
        ...

    def insert_entries(self, batch: Iterable[DailyEntry]) -> list[DailyEntry]:
        """Insert a batch of new entries atomically."""
        ...

    def update_entry(self, entry: DailyEntry) -> DailyEntry:
        """Replace the stored status map of an existing entry."""
        ...

    def delete_entry(self, entry_id: str) -> None:
        """Delete a daily entry."""
        ...
