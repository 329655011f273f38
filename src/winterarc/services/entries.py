"""Entry-level helpers: the status miss policy and status mutations.

Mutations never touch the entry they are given. They return a detached copy
for the caller to persist, which keeps "compute" and "commit" separate.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from ..logging_config import get_logger
from ..models.habit import DailyEntry, Habit

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class HabitStatusMap:
    """Read view over ``DailyEntry.habit_statuses`` with an explicit miss policy.

    A habit with no key is treated as not completed. Keys for habits that no
    longer exist are kept in storage but never reported as active statuses.
    """

    statuses: Mapping[str, bool]

    @classmethod
    def of(cls, entry: DailyEntry) -> HabitStatusMap:
        return cls(entry.habit_statuses or {})

    def is_completed(self, habit_id: str) -> bool:
        return bool(self.statuses.get(habit_id, False))

    def has_status(self, habit_id: str) -> bool:
        return habit_id in self.statuses

    def missing(self, habits: Iterable[Habit]) -> list[str]:
        """Ids of the given habits that have no recorded status yet."""

        return [habit.id for habit in habits if habit.id not in self.statuses]

    def orphans(self, habits: Iterable[Habit]) -> list[str]:
        """Status keys that reference no known habit."""

        known = {habit.id for habit in habits}
        return [habit_id for habit_id in self.statuses if habit_id not in known]


def habits_for_entry(entry: DailyEntry, habits: Iterable[Habit]) -> list[Habit]:
    """Habits that were active on the entry's day, in the order given."""

    return [habit for habit in habits if habit.is_active_on(entry.entry_date)]


def toggle(entry: DailyEntry, habit_id: str) -> DailyEntry:
    """Flip one habit's status; an absent status starts as not done and becomes done.

    Callers must check that the habit is active on the entry's day first.
    """

    current = HabitStatusMap.of(entry).is_completed(habit_id)
    return set_status(entry, habit_id, not current)


def set_status(entry: DailyEntry, habit_id: str, completed: bool) -> DailyEntry:
    statuses = dict(entry.habit_statuses or {})
    statuses[habit_id] = bool(completed)
    return entry.copy_with(statuses)


def entry_score(entry: DailyEntry, habits: Iterable[Habit]) -> tuple[int, int]:
    """Return ``(completed, active)`` counts for the habits active on the entry's day."""

    active = habits_for_entry(entry, habits)
    status_map = HabitStatusMap.of(entry)
    completed = sum(1 for habit in active if status_map.is_completed(habit.id))
    return completed, len(active)


def is_day_complete(entry: DailyEntry, habits: Iterable[Habit]) -> bool:
    """True when at least one habit was active and every active habit is done."""

    completed, active = entry_score(entry, habits)
    return active > 0 and completed == active


def strip_habit(entries: Iterable[DailyEntry], habit_id: str) -> list[DailyEntry]:
    """Copies of the entries that referenced ``habit_id``, with that key removed."""

    stripped: list[DailyEntry] = []
    for entry in entries:
        if habit_id in (entry.habit_statuses or {}):
            statuses = {k: v for k, v in entry.habit_statuses.items() if k != habit_id}
            stripped.append(entry.copy_with(statuses))
    logger.debug("Stripped habit from entries", extra={"habit_id": habit_id, "entries": len(stripped)})
    return stripped


__all__ = [
    "HabitStatusMap",
    "entry_score",
    "habits_for_entry",
    "is_day_complete",
    "set_status",
    "strip_habit",
    "toggle",
]
