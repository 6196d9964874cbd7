"""Pure streak and projection functions — date math only, never raises."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from dailygoals.engine.models import DayCount, Goal, StreakState

DEFAULT_GRACE_DAYS = 3


def local_date(ts: datetime, tz_name: str = "UTC") -> date:
    """Calendar date of `ts` in `tz_name`. Naive timestamps are taken as-is."""
    if ts.tzinfo is None:
        return ts.date()
    return ts.astimezone(ZoneInfo(tz_name)).date()


def days_between(earlier: date, later: date) -> int:
    """Whole calendar days from `earlier` to `later` (negative if reversed)."""
    return (later - earlier).days


def apply_completion(
    state: StreakState,
    now: datetime,
    tz_name: str = "UTC",
    grace_days: int = DEFAULT_GRACE_DAYS,
) -> StreakState:
    """Streak after a goal is completed at `now`.

    - already counted today: unchanged
    - no prior completion: 1
    - gap > grace_days: restart at 1
    - otherwise: +1, regardless of gap size
    """
    today = local_date(now, tz_name)
    last = state.last_completion_date
    if last is not None and local_date(last, tz_name) == today:
        return state

    if last is None:
        streak = 1
    elif days_between(local_date(last, tz_name), today) > grace_days:
        streak = 1
    else:
        streak = state.streak + 1
    return StreakState(streak=streak, last_completion_date=now)


def apply_decay(
    state: StreakState,
    now: datetime,
    tz_name: str = "UTC",
    grace_days: int = DEFAULT_GRACE_DAYS,
) -> StreakState:
    """Startup check: a streak idle for more than `grace_days` drops to 0.

    Unlike the completion path this resets to zero, and it leaves
    last_completion_date untouched.
    """
    last = state.last_completion_date
    if last is None:
        return state
    if days_between(local_date(last, tz_name), local_date(now, tz_name)) > grace_days:
        return StreakState(streak=0, last_completion_date=last)
    return state


def sort_active(goals: Iterable[Goal]) -> list[Goal]:
    """Priority rank descending, then oldest date_created first."""
    return sorted(goals, key=lambda g: (-g.priority.rank, g.date_created))


def completions_by_day(
    completed: Iterable[Goal],
    today: date,
    days: int = 7,
    tz_name: str = "UTC",
) -> list[DayCount]:
    """Completion counts for the `days` calendar days ending today, oldest first."""
    if days <= 0:
        return []
    counts: dict[date, int] = {}
    for goal in completed:
        if goal.date_completed is None:
            continue
        d = local_date(goal.date_completed, tz_name)
        counts[d] = counts.get(d, 0) + 1

    start = today - timedelta(days=days - 1)
    return [
        DayCount(day=(start + timedelta(days=i)).isoformat(), completed=counts.get(start + timedelta(days=i), 0))
        for i in range(days)
    ]
