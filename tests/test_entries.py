"""Tests for the status miss policy and entry mutations."""

from __future__ import annotations

from datetime import date

from winterarc.services.entries import (
    HabitStatusMap,
    entry_score,
    habits_for_entry,
    is_day_complete,
    set_status,
    strip_habit,
    toggle,
)


def test_missing_status_reads_as_not_done(entry_factory):
    status_map = HabitStatusMap.of(entry_factory(date(2025, 1, 2), {"a": True}))

    assert status_map.is_completed("a")
    assert not status_map.is_completed("b")
    assert not status_map.has_status("b")


def test_missing_and_orphan_keys(habit_factory, entry_factory):
    read = habit_factory("Read")
    run = habit_factory("Run")
    status_map = HabitStatusMap.of(entry_factory(date(2025, 1, 2), {read.id: True, "gone": False}))

    assert status_map.missing([read, run]) == [run.id]
    assert status_map.orphans([read, run]) == ["gone"]


def test_toggle_flips_and_initializes(entry_factory):
    entry = entry_factory(date(2025, 1, 2), {"a": True})

    flipped = toggle(entry, "a")
    added = toggle(entry, "b")

    assert flipped.habit_statuses == {"a": False}
    assert added.habit_statuses == {"a": True, "b": True}
    assert toggle(flipped, "a").habit_statuses == {"a": True}


def test_toggle_does_not_mutate_input(entry_factory):
    entry = entry_factory(date(2025, 1, 2), {"a": True})

    updated = toggle(entry, "a")

    assert entry.habit_statuses == {"a": True}
    assert updated.id == entry.id
    assert updated.entry_date == entry.entry_date


def test_set_status_is_idempotent(entry_factory):
    entry = entry_factory(date(2025, 1, 2))
    once = set_status(entry, "a", True)
    assert set_status(once, "a", True).habit_statuses == {"a": True}


def test_score_and_completion_use_active_habits(habit_factory, entry_factory):
    read = habit_factory("Read", created=date(2025, 1, 1))
    swim = habit_factory("Swim", created=date(2025, 1, 10))
    entry = entry_factory(date(2025, 1, 5), {read.id: True, "gone": True})

    assert habits_for_entry(entry, [read, swim]) == [read]
    assert entry_score(entry, [read, swim]) == (1, 1)
    assert is_day_complete(entry, [read, swim])


def test_day_without_active_habits_is_not_complete(habit_factory, entry_factory):
    swim = habit_factory("Swim", created=date(2025, 1, 10))
    assert not is_day_complete(entry_factory(date(2025, 1, 5)), [swim])


def test_strip_habit_returns_only_changed_entries(entry_factory):
    touched = entry_factory(date(2025, 1, 1), {"a": True, "b": False})
    untouched = entry_factory(date(2025, 1, 2), {"b": True})

    stripped = strip_habit([touched, untouched], "a")

    assert len(stripped) == 1
    assert stripped[0].id == touched.id
    assert stripped[0].habit_statuses == {"b": False}
