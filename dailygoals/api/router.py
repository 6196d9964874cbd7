"""Goal HTTP router — commands and derived views of the GoalEngine."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Request, Response

from dailygoals.auth import verify_api_key
from dailygoals.engine.engine import GoalEngine
from dailygoals.engine.models import (
    Goal,
    GoalCreate,
    GoalStats,
    GoalStep,
    GoalUpdate,
    StepCreate,
    StreakState,
    TimerStatus,
)

router = APIRouter(prefix="/goals", tags=["goals"], dependencies=[Depends(verify_api_key)])


def get_engine(request: Request) -> GoalEngine:
    return request.app.state.engine


def _timer_status(engine: GoalEngine) -> TimerStatus:
    goal_id = engine.active_goal_id
    if goal_id is None:
        return TimerStatus()
    return TimerStatus(active_goal_id=goal_id, time_spent=engine.elapsed(goal_id))


# ---------------------------------------------------------------------------
# Views (static paths before /{goal_id})
# ---------------------------------------------------------------------------


@router.get("", response_model=list[Goal])
async def list_active(engine: GoalEngine = Depends(get_engine)) -> list[Goal]:
    return engine.active_goals


@router.get("/completed", response_model=list[Goal])
async def list_completed(engine: GoalEngine = Depends(get_engine)) -> list[Goal]:
    return engine.completed_goals


@router.get("/streak", response_model=StreakState)
async def get_streak(engine: GoalEngine = Depends(get_engine)) -> StreakState:
    return engine.streak


@router.get("/stats", response_model=GoalStats)
async def get_stats(
    engine: GoalEngine = Depends(get_engine),
    days: int = Query(default=7, ge=1, le=366, description="Days of history for by_day"),
) -> GoalStats:
    return engine.stats(days)


# ---------------------------------------------------------------------------
# Timer
# ---------------------------------------------------------------------------


@router.get("/timer", response_model=TimerStatus)
async def timer_status(engine: GoalEngine = Depends(get_engine)) -> TimerStatus:
    return _timer_status(engine)


@router.post("/timer/stop", response_model=TimerStatus)
async def timer_stop(engine: GoalEngine = Depends(get_engine)) -> TimerStatus:
    engine.stop_timer()
    return _timer_status(engine)


@router.post("/timer/{goal_id}/start", response_model=TimerStatus)
async def timer_start(goal_id: uuid.UUID, engine: GoalEngine = Depends(get_engine)) -> TimerStatus:
    engine.start_timer(goal_id)
    return _timer_status(engine)


@router.post("/timer/{goal_id}/toggle", response_model=TimerStatus)
async def timer_toggle(goal_id: uuid.UUID, engine: GoalEngine = Depends(get_engine)) -> TimerStatus:
    engine.toggle_timer(goal_id)
    return _timer_status(engine)


# ---------------------------------------------------------------------------
# Goal commands
# ---------------------------------------------------------------------------


@router.post("", response_model=Goal, status_code=201)
async def create_goal(body: GoalCreate, engine: GoalEngine = Depends(get_engine)) -> Goal:
    return engine.add_goal(body.title, body.priority)


@router.post("/completed/{goal_id}/restore", response_model=Goal)
async def restore_goal(goal_id: uuid.UUID, engine: GoalEngine = Depends(get_engine)) -> Goal:
    return engine.restore_goal(goal_id)


@router.get("/{goal_id}", response_model=Goal)
async def get_goal(goal_id: uuid.UUID, engine: GoalEngine = Depends(get_engine)) -> Goal:
    return engine.get_goal(goal_id)


@router.put("/{goal_id}", response_model=Goal)
async def update_goal(
    goal_id: uuid.UUID,
    body: GoalUpdate,
    engine: GoalEngine = Depends(get_engine),
) -> Goal:
    current = engine.get_goal(goal_id)
    changes: dict = {"title": body.title, "priority": body.priority}
    if body.steps is not None:
        changes["steps"] = body.steps
    return engine.update_goal(current.model_copy(update=changes))


@router.delete("/{goal_id}", status_code=204)
async def delete_goal(goal_id: uuid.UUID, engine: GoalEngine = Depends(get_engine)) -> Response:
    engine.delete_goal(goal_id)
    return Response(status_code=204)


@router.post("/{goal_id}/toggle", response_model=Goal)
async def toggle_complete(goal_id: uuid.UUID, engine: GoalEngine = Depends(get_engine)) -> Goal:
    return engine.toggle_complete(goal_id)


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------


@router.post("/{goal_id}/steps", response_model=GoalStep, status_code=201)
async def add_step(
    goal_id: uuid.UUID,
    body: StepCreate,
    engine: GoalEngine = Depends(get_engine),
) -> GoalStep:
    return engine.add_step(goal_id, body.title)


@router.post("/{goal_id}/steps/{step_id}/toggle", response_model=GoalStep)
async def toggle_step(
    goal_id: uuid.UUID,
    step_id: uuid.UUID,
    engine: GoalEngine = Depends(get_engine),
) -> GoalStep:
    return engine.toggle_step(goal_id, step_id)


@router.delete("/{goal_id}/steps/{step_id}", status_code=204)
async def delete_step(
    goal_id: uuid.UUID,
    step_id: uuid.UUID,
    engine: GoalEngine = Depends(get_engine),
) -> Response:
    engine.delete_step(goal_id, step_id)
    return Response(status_code=204)
