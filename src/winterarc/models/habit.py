"""Habit tracking data structures."""

from __future__ import annotations

from datetime import date, datetime
from typing import ClassVar, Dict
from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel


def _new_id() -> str:
    return uuid4().hex


class Habit(SQLModel, table=True):
    """A user-defined habit the app tracks daily."""

    __tablename__: ClassVar[str] = "habit"

    id: str = Field(default_factory=_new_id, primary_key=True, max_length=32)
    name: str = Field(nullable=False, max_length=80, index=True)
    # Naive local time; only the calendar day matters.
    created_at: datetime = Field(
        default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False)
    )

    @property
    def creation_day(self) -> date:
        return self.created_at.date()

    def is_active_on(self, day: date) -> bool:
        """A habit counts from its creation day onward, creation day included."""

        return self.creation_day <= day


class DailyEntry(SQLModel, table=True):
    """Completion status of every habit for one calendar day."""

    __tablename__: ClassVar[str] = "daily_entry"

    id: str = Field(default_factory=_new_id, primary_key=True, max_length=32)
    entry_date: date = Field(nullable=False, unique=True, index=True)
    habit_statuses: Dict[str, bool] = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False)
    )

    def copy_with(self, statuses: Dict[str, bool]) -> "DailyEntry":
        """Return a detached copy of this entry carrying ``statuses``."""

        return DailyEntry(id=self.id, entry_date=self.entry_date, habit_statuses=dict(statuses))
