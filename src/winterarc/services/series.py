"""Dense per-day series, axis labels and month grids for charts and calendars."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Sequence

from ..models.habit import DailyEntry, Habit
from .backfill import index_by_day
from .calendar import (
    CalendarConfig,
    Period,
    days_in_range,
    month_grid,
    period_label,
    period_range,
    start_of_day,
)
from .entries import HabitStatusMap
from .streaks import completion_ratio, day_progress


@dataclass(frozen=True, slots=True)
class SeriesPoint:
    """One day on a habit's trend line.

    ``tracked`` is False for days before the habit existed or after today;
    such days are never ``completed``.
    """

    day: date
    completed: bool
    tracked: bool = True


@dataclass(frozen=True, slots=True)
class CalendarCell:
    """A day slot in the month grid with its progress ring value."""

    day: date
    progress: Optional[float]
    entry_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class PeriodView:
    """Everything a period chart needs in one read."""

    period: Period
    offset: int
    start: date
    end: date
    label: str
    points: list[SeriesPoint]
    axis_labels: list[str]
    completion: float


def series(
    habit: Habit,
    period: Period | str,
    offset: int,
    entries: Iterable[DailyEntry],
    today: date,
    config: CalendarConfig | None = None,
) -> list[SeriesPoint]:
    """One point per day of the period window, oldest first, with no gaps.

    A missing entry or missing status plots as not completed.
    """

    today = start_of_day(today)
    start, end = period_range(period, offset, habit.created_at, today, config)
    by_day = index_by_day(entries)

    points: list[SeriesPoint] = []
    for day in days_in_range(start, end):
        tracked = habit.creation_day <= day <= today
        entry = by_day.get(day)
        completed = (
            tracked and entry is not None and HabitStatusMap.of(entry).is_completed(habit.id)
        )
        points.append(SeriesPoint(day=day, completed=completed, tracked=tracked))
    return points


def period_completion(points: Sequence[SeriesPoint]) -> float:
    """Completed share of the tracked days in a series."""

    return completion_ratio(point.completed for point in points if point.tracked)


def axis_labels(points: Sequence[SeriesPoint]) -> list[str]:
    """X-axis captions, one per point.

    Up to a week shows every day number, up to a month every few day numbers,
    and longer ranges mark each month change with its initial.
    """

    count = len(points)
    if count <= 7:
        return [str(point.day.day) for point in points]

    if count <= 31:
        stride = max(count // 5, 1)
        return [str(point.day.day) if index % stride == 0 else " " for index, point in enumerate(points)]

    labels: list[str] = []
    last_month: tuple[int, int] | None = None
    for point in points:
        month = (point.day.year, point.day.month)
        if month != last_month:
            labels.append(calendar.month_abbr[point.day.month][:1])
            last_month = month
        else:
            labels.append(" ")
    return labels


def period_view(
    habit: Habit,
    period: Period | str,
    offset: int,
    entries: Iterable[DailyEntry],
    today: date,
    config: CalendarConfig | None = None,
) -> PeriodView:
    period = Period.parse(period)
    points = series(habit, period, offset, entries, today, config)
    start, end = period_range(period, offset, habit.created_at, today, config)
    return PeriodView(
        period=period,
        offset=offset,
        start=start,
        end=end,
        label=period_label(period, start, end),
        points=points,
        axis_labels=axis_labels(points),
        completion=period_completion(points),
    )


def month_cells(
    target_month: date,
    habits: Iterable[Habit],
    entries: Iterable[DailyEntry],
    config: CalendarConfig | None = None,
) -> list[Optional[CalendarCell]]:
    """The month grid with each day's progress; ``None`` marks padding slots.

    Days without an entry, or with no active habit, have ``progress=None``.
    """

    habits = list(habits)
    by_day = index_by_day(entries)
    cells: list[Optional[CalendarCell]] = []
    for day in month_grid(target_month, config):
        if day is None:
            cells.append(None)
            continue
        entry = by_day.get(day)
        if entry is None:
            cells.append(CalendarCell(day=day, progress=None))
        else:
            cells.append(CalendarCell(day=day, progress=day_progress(entry, habits), entry_id=entry.id))
    return cells


__all__ = [
    "CalendarCell",
    "PeriodView",
    "SeriesPoint",
    "axis_labels",
    "month_cells",
    "period_completion",
    "period_view",
    "series",
]
