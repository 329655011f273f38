"""SQLModel table exports."""

from .habit import DailyEntry, Habit

__all__ = ["DailyEntry", "Habit"]
