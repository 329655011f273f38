"""Seeded random histories checked against the engine's invariants.

Each seed builds a few habits and a sparse, partly stale entry store, then
checks backfill idempotence and that nothing before a habit's creation day
leaks into its ratio, streaks or series.
"""

from __future__ import annotations

import random
from datetime import date, datetime, time, timedelta

import pytest

from winterarc.models import DailyEntry, Habit
from winterarc.services.backfill import active_habits, reconcile
from winterarc.services.calendar import Period
from winterarc.services.series import series
from winterarc.services.streaks import best_streak, current_streak, habit_completion_ratio

FIRST_DAY = date(2024, 11, 1)
SEEDS = range(60)


def _random_history(seed: int) -> tuple[list[Habit], list[DailyEntry], date]:
    rng = random.Random(seed)
    today = FIRST_DAY + timedelta(days=rng.randint(20, 90))
    habits = [
        Habit(
            name=f"habit-{index}",
            created_at=datetime.combine(
                FIRST_DAY + timedelta(days=rng.randint(0, 100)), time(rng.randint(0, 23), rng.randint(0, 59))
            ),
        )
        for index in range(rng.randint(0, 4))
    ]
    ids = [habit.id for habit in habits] + ["deleted-habit"]

    entries = []
    for offset in range((today - FIRST_DAY).days + 1):
        if rng.random() < 0.4:
            continue
        # statuses are random even for habits not created yet
        statuses = {habit_id: rng.random() < 0.6 for habit_id in ids if rng.random() < 0.8}
        entries.append(DailyEntry(entry_date=FIRST_DAY + timedelta(days=offset), habit_statuses=statuses))
    return habits, entries, today


@pytest.mark.parametrize("seed", SEEDS)
def test_reconcile_is_idempotent(seed):
    habits, entries, today = _random_history(seed)

    first = reconcile(habits, entries, today)
    second = reconcile(habits, entries + first, today)

    assert second == []
    days = [entry.entry_date for entry in entries + first]
    assert len(days) == len(set(days))
    for entry in first:
        assert entry.entry_date <= today
        assert set(entry.habit_statuses) == {h.id for h in active_habits(habits, entry.entry_date)}

    # every day some habit was active, up to today, now has an entry
    covered = set(days)
    day = FIRST_DAY
    while day <= today:
        if active_habits(habits, day):
            assert day in covered
        day += timedelta(days=1)


@pytest.mark.parametrize("seed", SEEDS)
def test_days_before_creation_never_count(seed):
    habits, entries, today = _random_history(seed)

    for habit in habits:
        creation = habit.creation_day
        later = [entry for entry in entries if entry.entry_date >= creation]

        assert habit_completion_ratio(habit, entries, today=today) == habit_completion_ratio(
            habit, later, today=today
        )
        assert current_streak(habit, entries, today) == current_streak(habit, later, today)

        best = best_streak(habit, entries, today)
        assert best == best_streak(habit, later, today)
        if best.count:
            assert best.start >= creation
            assert (best.end - best.start).days + 1 == best.count
        assert best.count >= current_streak(habit, entries, today).count

        for point in series(habit, Period.ALL_TIME, 0, entries, today):
            if point.day < creation:
                assert not point.tracked
                assert not point.completed
        for point in series(habit, Period.MONTH, 0, entries, today):
            if point.day < creation or point.day > today:
                assert not point.tracked
                assert not point.completed
