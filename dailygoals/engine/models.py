"""Goal records — Pydantic v2 models shared by the engine, store and API."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class Priority(str, Enum):
    high = "high"
    medium = "medium"
    low = "low"

    @property
    def rank(self) -> int:
        """Sort weight; higher ranks list first."""
        return {"high": 3, "medium": 2, "low": 1}[self.value]

    @property
    def label(self) -> str:
        return f"{self.value.capitalize()} Priority"

    @property
    def color(self) -> str:
        return {"high": "red", "medium": "yellow", "low": "green"}[self.value]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GoalStep(BaseModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    title: str
    is_completed: bool = False


class Goal(BaseModel):
    """A daily goal. Lives in the active set or in the completed archive."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    title: str
    priority: Priority = Priority.medium
    time_spent: float = 0.0  # seconds
    is_completed: bool = False
    date_created: datetime = Field(default_factory=_utcnow)
    date_completed: datetime | None = None
    steps: list[GoalStep] = Field(default_factory=list)


class StreakState(BaseModel):
    """Persisted as settings.json."""

    streak: int = Field(default=0, ge=0)
    last_completion_date: datetime | None = None


class DayCount(BaseModel):
    day: str  # ISO date
    completed: int = 0


class GoalStats(BaseModel):
    total_completed: int = 0
    current_streak: int = 0
    total_time_spent: float = 0.0
    by_day: list[DayCount] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


class GoalCreate(BaseModel):
    title: str
    priority: Priority = Priority.medium


class GoalUpdate(BaseModel):
    title: str
    priority: Priority = Priority.medium
    steps: list[GoalStep] | None = None


class StepCreate(BaseModel):
    title: str


class TimerStatus(BaseModel):
    active_goal_id: uuid.UUID | None = None
    time_spent: float | None = None
