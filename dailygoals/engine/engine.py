"""GoalEngine — owns goals, the completed archive, the single timer and the streak.

Commands mutate in-memory state and then save all three records through the
injected store. Timer ticks are the one mutation that never saves. Read
methods return copies, so callers cannot change engine state behind its back.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timezone

from dailygoals.engine import events
from dailygoals.engine.errors import InvalidInput, NotFound, PersistenceFailure
from dailygoals.engine.events import EventBus
from dailygoals.engine.models import Goal, GoalStats, GoalStep, Priority, StreakState
from dailygoals.engine.store import GoalStore
from dailygoals.engine.streak import (
    DEFAULT_GRACE_DAYS,
    apply_completion,
    apply_decay,
    completions_by_day,
    local_date,
    sort_active,
)
from dailygoals.engine.ticker import ManualTicker, Ticker

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clean_title(title: str | None, what: str = "goal") -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise InvalidInput(f"A {what} title must not be empty")
    return cleaned


def _priority(value: Priority | str) -> Priority:
    try:
        return Priority(value)
    except ValueError:
        raise InvalidInput(f"Unknown priority: {value!r}") from None


class GoalEngine:
    def __init__(
        self,
        store: GoalStore,
        ticker: Ticker | None = None,
        clock: Clock = _utcnow,
        tz_name: str = "UTC",
        grace_days: int = DEFAULT_GRACE_DAYS,
        bus: EventBus | None = None,
    ) -> None:
        self.store = store
        self.ticker: Ticker = ticker if ticker is not None else ManualTicker()
        self.clock = clock
        self.tz_name = tz_name
        self.grace_days = grace_days
        self.events = bus or EventBus()

        self._active_goal_id: uuid.UUID | None = None
        self.last_persistence_error: PersistenceFailure | None = None

        self._goals, self._completed, self._streak = store.load()
        self._check_streak_decay()

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def active_goals(self) -> list[Goal]:
        """Active set ordered for display: priority, then creation order."""
        return [g.model_copy(deep=True) for g in sort_active(self._goals)]

    @property
    def completed_goals(self) -> list[Goal]:
        return [g.model_copy(deep=True) for g in self._completed]

    @property
    def streak(self) -> StreakState:
        return self._streak.model_copy()

    @property
    def current_streak(self) -> int:
        return self._streak.streak

    @property
    def active_goal_id(self) -> uuid.UUID | None:
        return self._active_goal_id

    def get_goal(self, goal_id: uuid.UUID) -> Goal:
        return self._require_active(goal_id).model_copy(deep=True)

    def elapsed(self, goal_id: uuid.UUID) -> float:
        """Accumulated seconds for a goal in either set."""
        goal = self._find(self._goals, goal_id) or self._find(self._completed, goal_id)
        if goal is None:
            raise NotFound("goal", goal_id)
        return goal.time_spent

    def stats(self, days: int = 7) -> GoalStats:
        today = local_date(self.clock(), self.tz_name)
        return GoalStats(
            total_completed=len(self._completed),
            current_streak=self._streak.streak,
            total_time_spent=sum(g.time_spent for g in self._goals)
            + sum(g.time_spent for g in self._completed),
            by_day=completions_by_day(self._completed, today, days, self.tz_name),
        )

    # ------------------------------------------------------------------
    # Goal commands
    # ------------------------------------------------------------------

    def add_goal(self, title: str, priority: Priority = Priority.medium) -> Goal:
        goal = Goal(
            title=_clean_title(title),
            priority=_priority(priority),
            date_created=self.clock(),
        )
        self._goals.append(goal)
        logger.info("Added goal %s (%s)", goal.id, goal.priority.value)
        self._save()
        self.events.emit(events.GOAL_ADDED, {"goal_id": goal.id})
        return goal.model_copy(deep=True)

    def update_goal(self, goal: Goal) -> Goal:
        """Replace the active entry with the same id, keeping its position.

        Timestamps, completion state and accumulated time stay engine-owned.
        """
        index = self._index(self._goals, goal.id)
        if index is None:
            raise NotFound("goal", goal.id)
        current = self._goals[index]
        updated = current.model_copy(
            update={
                "title": _clean_title(goal.title),
                "priority": _priority(goal.priority),
                "steps": [s.model_copy() for s in goal.steps],
                "time_spent": max(current.time_spent, goal.time_spent),
            }
        )
        self._goals[index] = updated
        self._save()
        return updated.model_copy(deep=True)

    def delete_goal(self, goal_id: uuid.UUID) -> None:
        index = self._index(self._goals, goal_id)
        if index is None:
            return
        if self._active_goal_id == goal_id:
            self._halt_timer()
        del self._goals[index]
        logger.info("Deleted goal %s", goal_id)
        self._save()
        self.events.emit(events.GOAL_DELETED, {"goal_id": goal_id})

    def toggle_complete(self, goal_id: uuid.UUID) -> Goal:
        index = self._index(self._goals, goal_id)
        if index is None:
            if self._index(self._completed, goal_id) is not None:
                return self.restore_goal(goal_id)
            raise NotFound("goal", goal_id)

        if self._active_goal_id == goal_id:
            self._halt_timer()

        now = self.clock()
        goal = self._goals.pop(index)
        goal.is_completed = True
        goal.date_completed = now
        self._completed.insert(0, goal)

        before = self._streak.streak
        self._streak = apply_completion(self._streak, now, self.tz_name, self.grace_days)
        if self._streak.streak != before:
            logger.info("Streak %d -> %d", before, self._streak.streak)
        logger.info("Completed goal %s", goal_id)

        self._save()
        self.events.emit(events.GOAL_COMPLETED, {"goal_id": goal_id, "streak": self._streak.streak})
        return goal.model_copy(deep=True)

    def restore_goal(self, goal_id: uuid.UUID) -> Goal:
        index = self._index(self._completed, goal_id)
        if index is None:
            raise NotFound("completed goal", goal_id)
        goal = self._completed.pop(index)
        goal.is_completed = False
        goal.date_completed = None
        self._goals.append(goal)
        logger.info("Restored goal %s", goal_id)
        self._save()
        self.events.emit(events.GOAL_RESTORED, {"goal_id": goal_id})
        return goal.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Step commands
    # ------------------------------------------------------------------

    def add_step(self, goal_id: uuid.UUID, title: str) -> GoalStep:
        goal = self._require_active(goal_id)
        step = GoalStep(title=_clean_title(title, "step"))
        goal.steps.append(step)
        self._save()
        return step.model_copy()

    def toggle_step(self, goal_id: uuid.UUID, step_id: uuid.UUID) -> GoalStep:
        step = self._require_step(goal_id, step_id)
        step.is_completed = not step.is_completed
        self._save()
        return step.model_copy()

    def delete_step(self, goal_id: uuid.UUID, step_id: uuid.UUID) -> None:
        goal = self._require_active(goal_id)
        step = self._require_step(goal_id, step_id)
        goal.steps.remove(step)
        self._save()

    # ------------------------------------------------------------------
    # Timer
    # ------------------------------------------------------------------

    def start_timer(self, goal_id: uuid.UUID) -> None:
        self._require_active(goal_id)
        if self._active_goal_id == goal_id and self.ticker.running:
            return
        if self._active_goal_id is not None:
            self.stop_timer()
        self._active_goal_id = goal_id
        self.ticker.start(self.tick)
        logger.info("Timer started for goal %s", goal_id)
        self.events.emit(events.TIMER_STARTED, {"goal_id": goal_id})

    def stop_timer(self) -> None:
        """Idempotent; saves accumulated time when a timer was running."""
        if self._active_goal_id is None:
            self.ticker.cancel()
            return
        self._halt_timer()
        self._save()

    def toggle_timer(self, goal_id: uuid.UUID) -> None:
        if self._active_goal_id == goal_id:
            self.stop_timer()
        else:
            self.start_timer(goal_id)

    def tick(self, elapsed: float) -> None:
        """Add `elapsed` seconds to the timer target. Never persists."""
        if self._active_goal_id is None or elapsed <= 0:
            return
        goal = self._find(self._goals, self._active_goal_id)
        if goal is None:
            self._halt_timer()
            return
        goal.time_spent += elapsed

    def shutdown(self) -> None:
        """Stop the ticker and make a best-effort final save."""
        if self._active_goal_id is not None:
            self._halt_timer()
        self.ticker.cancel()
        self._save()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _halt_timer(self) -> None:
        goal_id = self._active_goal_id
        self.ticker.cancel()
        self._active_goal_id = None
        logger.info("Timer stopped for goal %s", goal_id)
        self.events.emit(events.TIMER_STOPPED, {"goal_id": goal_id})

    def _check_streak_decay(self) -> None:
        decayed = apply_decay(self._streak, self.clock(), self.tz_name, self.grace_days)
        if decayed.streak != self._streak.streak:
            logger.info("Streak expired (%d -> 0)", self._streak.streak)
            self._streak = decayed
            self._save()

    def _save(self) -> None:
        try:
            self.store.save(self._goals, self._completed, self._streak)
        except PersistenceFailure as e:
            logger.error("Persisting goal state failed: %s", e)
            self.last_persistence_error = e
            self.events.emit(events.PERSISTENCE_FAILED, {"error": str(e)})
        else:
            self.last_persistence_error = None

    def _require_active(self, goal_id: uuid.UUID) -> Goal:
        goal = self._find(self._goals, goal_id)
        if goal is None:
            raise NotFound("goal", goal_id)
        return goal

    def _require_step(self, goal_id: uuid.UUID, step_id: uuid.UUID) -> GoalStep:
        goal = self._require_active(goal_id)
        for step in goal.steps:
            if step.id == step_id:
                return step
        raise NotFound("step", step_id)

    @staticmethod
    def _index(goals: list[Goal], goal_id: uuid.UUID) -> int | None:
        for i, goal in enumerate(goals):
            if goal.id == goal_id:
                return i
        return None

    @classmethod
    def _find(cls, goals: list[Goal], goal_id: uuid.UUID) -> Goal | None:
        index = cls._index(goals, goal_id)
        return goals[index] if index is not None else None
