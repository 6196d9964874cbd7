"""Shared fixtures for the test suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from dailygoals.engine.engine import GoalEngine
from dailygoals.engine.models import Goal, Priority, StreakState
from dailygoals.engine.store import InMemoryStore
from dailygoals.engine.ticker import ManualTicker
from dailygoals.main import app

NOW = datetime(2026, 2, 15, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Fake clock (no wall time in tests)
# ---------------------------------------------------------------------------

class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def ticker():
    return ManualTicker()


@pytest.fixture()
def store():
    return InMemoryStore()


@pytest.fixture()
def engine(store, ticker, clock):
    return GoalEngine(store=store, ticker=ticker, clock=clock)


@pytest.fixture()
def override_engine(engine):
    """Install the test engine on the app so no data dir is touched."""
    app.state.engine = engine
    yield engine
    del app.state.engine


@pytest.fixture()
async def client(override_engine):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def make_goal(
    title: str = "Write report",
    priority: Priority = Priority.medium,
    completed_at: datetime | None = None,
    time_spent: float = 0.0,
) -> Goal:
    """Helper to build a stored goal record."""
    return Goal(
        title=title,
        priority=priority,
        time_spent=time_spent,
        is_completed=completed_at is not None,
        date_created=NOW - timedelta(days=1),
        date_completed=completed_at,
    )


def streak_days_ago(streak: int, days: int) -> StreakState:
    return StreakState(streak=streak, last_completion_date=NOW - timedelta(days=days))
