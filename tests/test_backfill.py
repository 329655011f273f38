"""Tests for history backfill and entry healing."""

from __future__ import annotations

from datetime import date, time

from winterarc.services.backfill import (
    active_habits,
    ensure_all_habits_included,
    ensure_entry_exists,
    index_by_day,
    reconcile,
)


class TestReconcile:
    def test_nothing_to_do_without_habits_or_entries(self):
        assert reconcile([], [], date(2025, 1, 7)) == []

    def test_fills_every_day_from_creation_to_today(self, habit_factory):
        habit = habit_factory(created=date(2025, 1, 1), at=time(22, 15))

        planned = reconcile([habit], [], date(2025, 1, 7))

        assert [e.entry_date for e in planned] == [date(2025, 1, d) for d in range(1, 8)]
        assert all(e.habit_statuses == {habit.id: False} for e in planned)

    def test_only_active_habits_get_statuses(self, habit_factory):
        early = habit_factory("Read", created=date(2025, 1, 1))
        late = habit_factory("Run", created=date(2025, 1, 3))

        planned = {e.entry_date: e for e in reconcile([early, late], [], date(2025, 1, 4))}

        assert planned[date(2025, 1, 2)].habit_statuses == {early.id: False}
        assert planned[date(2025, 1, 3)].habit_statuses == {early.id: False, late.id: False}

    def test_existing_entries_are_not_replaced(self, habit_factory, entry_factory):
        habit = habit_factory(created=date(2025, 1, 1))
        existing = entry_factory(date(2025, 1, 2), {habit.id: True})

        planned = reconcile([habit], [existing], date(2025, 1, 3))

        assert [e.entry_date for e in planned] == [date(2025, 1, 1), date(2025, 1, 3)]

    def test_gap_before_any_habit_gets_no_entries(self, habit_factory, entry_factory):
        # An old entry whose habit was deleted; the current habit starts later.
        orphan = entry_factory(date(2024, 12, 28), {"deleted-habit": True})
        habit = habit_factory(created=date(2025, 1, 1))

        planned = reconcile([habit], [orphan], date(2025, 1, 2))

        assert [e.entry_date for e in planned] == [date(2025, 1, 1), date(2025, 1, 2)]

    def test_running_twice_adds_nothing(self, habit_factory, entry_factory):
        habits = [habit_factory("Read", created=date(2024, 12, 20)), habit_factory("Run", created=date(2025, 1, 4))]
        existing = [entry_factory(date(2024, 12, 25), {habits[0].id: True})]

        first = reconcile(habits, existing, date(2025, 1, 7))
        second = reconcile(habits, existing + first, date(2025, 1, 7))

        assert len(first) == 18
        assert second == []

    def test_habit_created_in_future_is_ignored_until_its_day(self, habit_factory):
        habit = habit_factory(created=date(2025, 2, 1))
        assert reconcile([habit], [], date(2025, 1, 7)) == []


class TestSingleDay:
    def test_ensure_entry_exists_builds_missing_day(self, habit_factory):
        habit = habit_factory(created=date(2025, 1, 1))

        entry = ensure_entry_exists(date(2025, 1, 5), [habit], [])

        assert entry is not None
        assert entry.entry_date == date(2025, 1, 5)
        assert entry.habit_statuses == {habit.id: False}

    def test_ensure_entry_exists_skips_existing_or_inactive_days(self, habit_factory, entry_factory):
        habit = habit_factory(created=date(2025, 1, 3))
        existing = entry_factory(date(2025, 1, 5), {habit.id: True})

        assert ensure_entry_exists(date(2025, 1, 5), [habit], [existing]) is None
        assert ensure_entry_exists(date(2025, 1, 2), [habit], [existing]) is None

    def test_ensure_all_habits_included_adds_only_active(self, habit_factory, entry_factory):
        old = habit_factory("Read", created=date(2025, 1, 1))
        new = habit_factory("Run", created=date(2025, 1, 5))
        future = habit_factory("Swim", created=date(2025, 1, 9))
        entry = entry_factory(date(2025, 1, 6), {old.id: True})

        healed = ensure_all_habits_included(entry, [old, new, future])

        assert healed.habit_statuses == {old.id: True, new.id: False}
        assert healed.id == entry.id
        # the input entry is left untouched
        assert entry.habit_statuses == {old.id: True}


def test_active_habits_counts_creation_day(habit_factory):
    habit = habit_factory(created=date(2025, 1, 3), at=time(23, 59))
    assert active_habits([habit], date(2025, 1, 3)) == [habit]
    assert active_habits([habit], date(2025, 1, 2)) == []


def test_index_by_day_keeps_first_duplicate(entry_factory):
    first = entry_factory(date(2025, 1, 1), {"a": True})
    second = entry_factory(date(2025, 1, 1), {"a": False})

    assert index_by_day([first, second]) == {date(2025, 1, 1): first}
