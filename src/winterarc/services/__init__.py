"""Service module exports."""

from . import backfill, calendar, entries, series, streaks, tracker

__all__ = [
    "backfill",
    "calendar",
    "entries",
    "series",
    "streaks",
    "tracker",
]
