"""Calendar helpers: day normalization, period windows and month grids.

Every function takes "today" and the calendar conventions explicitly so the
history engine never reads ambient clock or locale state.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterator, Optional, Protocol


class Clock(Protocol):
    """Source of the current calendar day."""

    def today(self) -> date:  # pragma: no cover - interface
        ...


class SystemClock:
    """Clock backed by the device's local calendar."""

    def today(self) -> date:
        return date.today()


@dataclass(frozen=True, slots=True)
class FixedClock:
    """Clock pinned to one day, used by tests and replays."""

    current: date

    def today(self) -> date:
        return start_of_day(self.current)


@dataclass(frozen=True, slots=True)
class CalendarConfig:
    """Week and month conventions for grids and period windows."""

    first_weekday: int = calendar.MONDAY
    # Month that UI month offsets count from.
    epoch_month: date = field(default=date(2024, 12, 1))


class Period(str, Enum):
    """Time windows available to stats and charts."""

    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL_TIME = "all_time"

    @classmethod
    def parse(cls, value: str | Period) -> Period:
        if isinstance(value, Period):
            return value
        normalized = value.strip().lower().replace("-", "_").replace(" ", "_")
        if normalized == "alltime":
            normalized = cls.ALL_TIME.value
        try:
            return cls(normalized)
        except ValueError as exc:
            choices = ", ".join(p.value for p in cls)
            raise ValueError(f"Unknown period {value!r}; expected one of: {choices}") from exc


def start_of_day(value: date | datetime) -> date:
    """Truncate a date or datetime to its calendar day."""

    if isinstance(value, datetime):
        return value.date()
    return value


def is_same_day(a: date | datetime, b: date | datetime) -> bool:
    return start_of_day(a) == start_of_day(b)


def week_start(value: date | datetime, first_weekday: int = calendar.MONDAY) -> date:
    """Return the first day of the week containing ``value``."""

    day = start_of_day(value)
    return day - timedelta(days=(day.weekday() - first_weekday) % 7)


def month_start(value: date | datetime) -> date:
    return start_of_day(value).replace(day=1)


def add_months(value: date, months: int) -> date:
    """Shift the first day of ``value``'s month by ``months`` (negative allowed)."""

    index = value.year * 12 + (value.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def month_end(value: date) -> date:
    first = month_start(value)
    return first.replace(day=calendar.monthrange(first.year, first.month)[1])


def days_in_range(start: date, end: date) -> Iterator[date]:
    """Yield every day from ``start`` to ``end`` inclusive (nothing if end < start)."""

    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def period_range(
    kind: Period | str,
    offset: int,
    habit_creation_date: date | datetime,
    today: date,
    config: CalendarConfig | None = None,
) -> tuple[date, date]:
    """Return the inclusive ``(start, end)`` window for a period.

    ``offset`` counts whole periods back from the current one: 0 is the current
    week/month/year, 1 the previous one, and negative values move forward.
    ``ALL_TIME`` ignores the offset and spans creation day to today.
    """

    kind = Period.parse(kind)
    config = config or CalendarConfig()
    today = start_of_day(today)

    if kind is Period.WEEK:
        start = week_start(today, config.first_weekday) - timedelta(weeks=offset)
        return start, start + timedelta(days=6)
    if kind is Period.MONTH:
        start = add_months(month_start(today), -offset)
        return start, month_end(start)
    if kind is Period.YEAR:
        year = today.year - offset
        return date(year, 1, 1), date(year, 12, 31)
    return start_of_day(habit_creation_date), today


def period_label(kind: Period | str, start: date, end: date) -> str:
    """Human caption for a period window ("Jan 2025", "2025", "Dec 2024-Mar 2025")."""

    kind = Period.parse(kind)
    if kind is Period.YEAR:
        return f"{start.year}"
    if kind is Period.ALL_TIME:
        return f"{start.strftime('%b %Y')}-{end.strftime('%b %Y')}"
    return start.strftime("%b %Y")


def month_for_offset(offset: int, config: CalendarConfig | None = None) -> date:
    """Translate a UI month offset (months after the epoch month) into a month."""

    config = config or CalendarConfig()
    return add_months(month_start(config.epoch_month), offset)


def month_grid(target_month: date, config: CalendarConfig | None = None) -> list[Optional[date]]:
    """Lay out ``target_month`` as a 7-column grid padded with ``None`` slots."""

    config = config or CalendarConfig()
    first = month_start(target_month)
    leading = (first.weekday() - config.first_weekday) % 7

    cells: list[Optional[date]] = [None] * leading
    cells.extend(days_in_range(first, month_end(first)))
    cells.extend([None] * ((7 - len(cells) % 7) % 7))
    return cells


def weekday_headers(config: CalendarConfig | None = None) -> list[str]:
    """Single-letter weekday column headers in grid order."""

    config = config or CalendarConfig()
    return [calendar.day_abbr[(config.first_weekday + i) % 7][0] for i in range(7)]


__all__ = [
    "CalendarConfig",
    "Clock",
    "FixedClock",
    "Period",
    "SystemClock",
    "add_months",
    "days_in_range",
    "is_same_day",
    "month_end",
    "month_for_offset",
    "month_grid",
    "month_start",
    "period_label",
    "period_range",
    "start_of_day",
    "week_start",
    "weekday_headers",
]
