"""Streak and completion calculations over daily entries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from ..models.habit import DailyEntry, Habit
from .backfill import active_habits, index_by_day
from .calendar import start_of_day
from .entries import HabitStatusMap

Window = tuple[date, date]


@dataclass(frozen=True, slots=True)
class Streak:
    """A run of consecutive completed days."""

    count: int
    start: Optional[date] = None
    end: Optional[date] = None


@dataclass(frozen=True, slots=True)
class HabitSummary:
    """Per-habit numbers shown on the stats list."""

    habit_id: str
    name: str
    current_streak: Streak
    best_streak: Streak
    completion: float

    @property
    def completion_percent(self) -> int:
        return int(self.completion * 100)


def completion_ratio(flags: Iterable[bool]) -> float:
    """Share of ``True`` flags; 0.0 for an empty scope."""

    total = 0
    completed = 0
    for flag in flags:
        total += 1
        completed += 1 if flag else 0
    return completed / total if total else 0.0


def _habit_days(
    habit: Habit,
    entries: Iterable[DailyEntry],
    today: date | None = None,
    window: Window | None = None,
) -> dict[date, DailyEntry]:
    """Entries a habit can be judged on: from its creation day, optionally bounded."""

    lower = habit.creation_day
    upper = start_of_day(today) if today is not None else None
    if window is not None:
        lower = max(lower, window[0])
        upper = window[1] if upper is None else min(upper, window[1])
    return {
        day: entry
        for day, entry in index_by_day(entries).items()
        if day >= lower and (upper is None or day <= upper)
    }


def habit_completion_ratio(
    habit: Habit,
    entries: Iterable[DailyEntry],
    *,
    today: date | None = None,
    window: Window | None = None,
) -> float:
    """Completed share of the recorded days since the habit was created."""

    days = _habit_days(habit, entries, today, window)
    return completion_ratio(HabitStatusMap.of(entry).is_completed(habit.id) for entry in days.values())


def overall_completion_ratio(
    habits: Iterable[Habit],
    entries: Iterable[DailyEntry],
    *,
    window: Window | None = None,
) -> float:
    """Completed share of all habit-days, counting only habits active on each day."""

    habits = list(habits)
    flags: list[bool] = []
    for day, entry in sorted(index_by_day(entries).items()):
        if window is not None and not (window[0] <= day <= window[1]):
            continue
        status_map = HabitStatusMap.of(entry)
        flags.extend(status_map.is_completed(habit.id) for habit in active_habits(habits, day))
    return completion_ratio(flags)


def day_progress(entry: DailyEntry, habits: Iterable[Habit]) -> Optional[float]:
    """Fraction of the day's active habits that are done, or ``None`` if none were active.

    Status keys of deleted habits are ignored.
    """

    active = active_habits(habits, entry.entry_date)
    if not active:
        return None
    status_map = HabitStatusMap.of(entry)
    return completion_ratio(status_map.is_completed(habit.id) for habit in active)


def current_streak(
    habit: Habit,
    entries: Iterable[DailyEntry],
    today: date,
    *,
    window: Window | None = None,
) -> Streak:
    """Count completed days backward from today.

    A day that is not completed or has no entry at all ends the streak.
    """

    today = start_of_day(today)
    days = _habit_days(habit, entries, today, window)
    anchor = today if window is None else min(today, window[1])

    count = 0
    cursor = anchor
    while cursor in days and HabitStatusMap.of(days[cursor]).is_completed(habit.id):
        count += 1
        cursor -= timedelta(days=1)

    if count == 0:
        return Streak(0)
    return Streak(count, start=anchor - timedelta(days=count - 1), end=anchor)


def best_streak(
    habit: Habit,
    entries: Iterable[DailyEntry],
    today: date,
    *,
    window: Window | None = None,
) -> Streak:
    """Return the longest completed run with its date range.

    The running streak resets on a day not completed and on any gap between
    consecutive entries. The first maximum found wins ties, so a run still open
    at the latest entry only takes over when strictly longer. Every run ends on
    its last completed day: an ongoing run ends today, and one followed by
    missing days is closed where the record stops.
    """

    today = start_of_day(today)
    days = _habit_days(habit, entries, today, window)

    best = 0
    best_start: date | None = None
    best_end: date | None = None
    running = 0
    running_start: date | None = None
    previous: date | None = None

    for day in sorted(days):
        if previous is not None and (day - previous).days > 1:
            running = 0
            running_start = None

        if HabitStatusMap.of(days[day]).is_completed(habit.id):
            if running == 0:
                running_start = day
            running += 1
            if running > best:
                best, best_start, best_end = running, running_start, day
        else:
            running = 0
            running_start = None
        previous = day

    if best == 0:
        return Streak(0)
    return Streak(best, start=best_start, end=best_end)


def summarize_habit(habit: Habit, entries: Iterable[DailyEntry], today: date) -> HabitSummary:
    entries = list(entries)
    return HabitSummary(
        habit_id=habit.id,
        name=habit.name,
        current_streak=current_streak(habit, entries, today),
        best_streak=best_streak(habit, entries, today),
        completion=habit_completion_ratio(habit, entries, today=today),
    )


__all__ = [
    "HabitSummary",
    "Streak",
    "best_streak",
    "completion_ratio",
    "current_streak",
    "day_progress",
    "habit_completion_ratio",
    "overall_completion_ratio",
    "summarize_habit",
]
