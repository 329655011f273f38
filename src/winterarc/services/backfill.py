"""Backfill: keep one daily entry per calendar day from the first habit to today."""

from __future__ import annotations

from datetime import date
from typing import Iterable

from ..logging_config import get_logger
from ..models.habit import DailyEntry, Habit
from .calendar import days_in_range, start_of_day
from .entries import HabitStatusMap

logger = get_logger(__name__)


def active_habits(habits: Iterable[Habit], day: date) -> list[Habit]:
    """Habits created on or before ``day``."""

    return [habit for habit in habits if habit.is_active_on(day)]


def index_by_day(entries: Iterable[DailyEntry]) -> dict[date, DailyEntry]:
    """Map each calendar day to its entry; the first entry seen for a day wins."""

    by_day: dict[date, DailyEntry] = {}
    for entry in entries:
        day = start_of_day(entry.entry_date)
        if day in by_day:
            logger.warning(
                "Duplicate daily entry ignored",
                extra={"entry_date": day.isoformat(), "entry_id": entry.id},
            )
            continue
        by_day[day] = entry
    return by_day


def _new_entry(day: date, habits: Iterable[Habit]) -> DailyEntry:
    return DailyEntry(entry_date=day, habit_statuses={habit.id: False for habit in habits})


def reconcile(
    habits: Iterable[Habit], entries: Iterable[DailyEntry], today: date
) -> list[DailyEntry]:
    """Plan the entries needed so every tracked day up to ``today`` has one.

    The range starts at the earliest habit creation day or existing entry day,
    whichever comes first. Days with no active habit get no entry. Existing
    entries are left alone, so running this against its own output is a no-op.
    """

    habits = list(habits)
    by_day = index_by_day(entries)
    today = start_of_day(today)

    candidates = [habit.creation_day for habit in habits] + list(by_day)
    if not candidates:
        return []

    planned: list[DailyEntry] = []
    for day in days_in_range(min(candidates), today):
        if day in by_day:
            continue
        active = active_habits(habits, day)
        if not active:
            continue
        planned.append(_new_entry(day, active))

    if planned:
        logger.info(
            "Backfill planned",
            extra={
                "count": len(planned),
                "first": planned[0].entry_date.isoformat(),
                "last": planned[-1].entry_date.isoformat(),
            },
        )
    return planned


def ensure_entry_exists(
    day: date, habits: Iterable[Habit], entries: Iterable[DailyEntry]
) -> DailyEntry | None:
    """Plan the entry for a single day, or ``None`` when it exists or nothing is active."""

    day = start_of_day(day)
    if day in index_by_day(entries):
        return None
    active = active_habits(habits, day)
    if not active:
        return None
    return _new_entry(day, active)


def ensure_all_habits_included(entry: DailyEntry, habits: Iterable[Habit]) -> DailyEntry:
    """Return a copy of ``entry`` with a ``False`` status for each active habit it lacks."""

    missing = HabitStatusMap.of(entry).missing(active_habits(habits, entry.entry_date))
    statuses = dict(entry.habit_statuses or {})
    for habit_id in missing:
        statuses[habit_id] = False
    if missing:
        logger.debug(
            "Healed entry statuses",
            extra={"entry_date": entry.entry_date.isoformat(), "added": len(missing)},
        )
    return entry.copy_with(statuses)


__all__ = [
    "active_habits",
    "ensure_all_habits_included",
    "ensure_entry_exists",
    "index_by_day",
    "reconcile",
]
