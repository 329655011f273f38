"""Habit tracker service: snapshot the store, compute, then commit one batch.

The tracker keeps no state of its own. Each call reads fresh snapshots from
the repository, plans its writes with the pure engine functions and hands the
batch to the repository, so a failed commit leaves nothing half-applied.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..domain.repositories.habit import HabitRepository
from ..logging_config import get_logger
from ..models.habit import DailyEntry, Habit
from . import backfill, entries as entry_ops
from .calendar import CalendarConfig, Clock, Period, SystemClock, start_of_day
from .series import CalendarCell, PeriodView, month_cells, period_view
from .streaks import HabitSummary, overall_completion_ratio, summarize_habit

logger = get_logger(__name__)

MAX_HABIT_NAME = 80


@dataclass(frozen=True, slots=True)
class DayStatus:
    """One habit's row on a day sheet."""

    habit_id: str
    name: str
    completed: bool


@dataclass(frozen=True, slots=True)
class DaySheet:
    """A day's entry together with the habits that apply to it."""

    entry: DailyEntry
    rows: list[DayStatus]

    @property
    def completed(self) -> int:
        return sum(1 for row in self.rows if row.completed)

    @property
    def total(self) -> int:
        return len(self.rows)

    @property
    def all_done(self) -> bool:
        return bool(self.rows) and self.completed == self.total


@dataclass(frozen=True, slots=True)
class EntryRow:
    """One line of the entries list: the entry and its score."""

    entry: DailyEntry
    completed: int
    active: int
    complete: bool


class HabitTracker:
    """Application-facing operations over a habit repository."""

    def __init__(
        self,
        repository: HabitRepository,
        *,
        clock: Clock | None = None,
        calendar_config: CalendarConfig | None = None,
    ):
        self.repository = repository
        self.clock = clock or SystemClock()
        self.calendar_config = calendar_config or CalendarConfig()

    def today(self) -> date:
        return start_of_day(self.clock.today())

    # Habits
    def add_habit(self, name: str, *, created_at: datetime | None = None) -> Habit:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValueError("Habit name must not be empty")
        if len(cleaned) > MAX_HABIT_NAME:
            raise ValueError(f"Habit name must be at most {MAX_HABIT_NAME} characters")
        if created_at is None:
            created_at = datetime.combine(self.today(), datetime.now().time())
        return self.repository.create_habit(Habit(name=cleaned, created_at=created_at))

    def delete_habit(self, habit_id: str) -> None:
        self._require_habit(habit_id)
        self.repository.delete_habit(habit_id)

    def _require_habit(self, habit_id: str) -> Habit:
        habit = self.repository.get_habit(habit_id)
        if habit is None:
            raise ValueError(f"Unknown habit id: {habit_id}")
        return habit

    # History maintenance
    def sync(self) -> int:
        """Backfill every missing day up to today; returns the number of entries added."""

        planned = backfill.reconcile(
            self.repository.list_habits(), self.repository.list_entries(), self.today()
        )
        self.repository.insert_entries(planned)
        return len(planned)

    def open_day(self, day: date | None = None) -> Optional[DaySheet]:
        """Make sure ``day`` (default today) has a complete entry and return its sheet.

        Returns ``None`` when no habit was active on that day.
        """

        day = start_of_day(day) if day is not None else self.today()
        habits = self.repository.list_habits()
        all_entries = self.repository.list_entries()

        entry = backfill.index_by_day(all_entries).get(day)
        if entry is None:
            planned = backfill.ensure_entry_exists(day, habits, all_entries)
            if planned is None:
                return None
            entry = self.repository.insert_entries([planned])[0]
        else:
            healed = backfill.ensure_all_habits_included(entry, habits)
            if healed.habit_statuses != entry.habit_statuses:
                entry = self.repository.update_entry(healed)

        return self._sheet(entry, habits)

    def _sheet(self, entry: DailyEntry, habits: list[Habit]) -> DaySheet:
        status_map = entry_ops.HabitStatusMap.of(entry)
        rows = [
            DayStatus(habit_id=habit.id, name=habit.name, completed=status_map.is_completed(habit.id))
            for habit in entry_ops.habits_for_entry(entry, habits)
        ]
        return DaySheet(entry=entry, rows=rows)

    def toggle(self, habit_id: str, day: date | None = None) -> DaySheet:
        """Flip a habit's status on ``day`` (default today)."""

        day = start_of_day(day) if day is not None else self.today()
        habit = self._require_habit(habit_id)
        if not habit.is_active_on(day):
            raise ValueError(f"Habit {habit.name!r} was not active on {day.isoformat()}")

        sheet = self.open_day(day)
        if sheet is None:
            raise ValueError(f"No entry could be opened for {day.isoformat()}")
        habits = self.repository.list_habits()
        updated = entry_ops.toggle(sheet.entry, habit_id)
        orphans = entry_ops.HabitStatusMap.of(updated).orphans(habits)
        if orphans:
            updated = updated.copy_with(
                {k: v for k, v in updated.habit_statuses.items() if k not in orphans}
            )
            logger.info("Dropped orphan statuses", extra={"entry_id": updated.id, "count": len(orphans)})
        saved = self.repository.update_entry(updated)
        logger.debug(
            "Habit toggled",
            extra={"habit_id": habit_id, "entry_date": day.isoformat(), "completed": saved.habit_statuses[habit_id]},
        )
        return self._sheet(saved, habits)

    def list_entries(self) -> list[EntryRow]:
        """Every stored entry, oldest first, scored against the habits active that day."""

        habits = self.repository.list_habits()
        rows = []
        for entry in self.repository.list_entries():
            completed, active = entry_ops.entry_score(entry, habits)
            rows.append(
                EntryRow(
                    entry=entry,
                    completed=completed,
                    active=active,
                    complete=entry_ops.is_day_complete(entry, habits),
                )
            )
        return rows

    def delete_entry(self, entry_id: str) -> None:
        self.repository.delete_entry(entry_id)

    # Analytics
    def summaries(self) -> list[HabitSummary]:
        today = self.today()
        all_entries = self.repository.list_entries()
        return [summarize_habit(habit, all_entries, today) for habit in self.repository.list_habits()]

    def summary(self, habit_id: str) -> HabitSummary:
        habit = self._require_habit(habit_id)
        return summarize_habit(habit, self.repository.list_entries(), self.today())

    def overall_completion(self) -> float:
        return overall_completion_ratio(self.repository.list_habits(), self.repository.list_entries())

    def period(self, habit_id: str, period: Period | str = Period.WEEK, offset: int = 0) -> PeriodView:
        habit = self._require_habit(habit_id)
        return period_view(
            habit, period, offset, self.repository.list_entries(), self.today(), self.calendar_config
        )

    def calendar_month(self, target_month: date | None = None) -> list[Optional[CalendarCell]]:
        target = target_month or self.today()
        return month_cells(
            target, self.repository.list_habits(), self.repository.list_entries(), self.calendar_config
        )


__all__ = ["DaySheet", "DayStatus", "EntryRow", "HabitTracker"]
