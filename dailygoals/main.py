import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from dailygoals.api.router import router as goals_router
from dailygoals.config import Settings, settings
from dailygoals.engine.engine import GoalEngine
from dailygoals.engine.errors import InvalidInput, NotFound
from dailygoals.engine.store import JsonGoalStore
from dailygoals.engine.ticker import AsyncioTicker
from dailygoals.logging_config import configure_logging

logger = logging.getLogger(__name__)


def build_engine(cfg: Settings) -> GoalEngine:
    return GoalEngine(
        store=JsonGoalStore(cfg.data_dir),
        ticker=AsyncioTicker(cfg.tick_interval_seconds),
        tz_name=cfg.default_tz,
        grace_days=cfg.streak_grace_days,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    app.state.engine = build_engine(settings)
    logger.info("Goal engine ready (data_dir=%s)", settings.data_dir)
    try:
        yield
    finally:
        app.state.engine.shutdown()
        logger.info("Goal engine shut down")


app = FastAPI(title="DailyGoals", version="0.1.0", lifespan=lifespan)
app.include_router(goals_router)


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.get("/")
async def root() -> dict:
    return {
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "goals": {
            "active": "/goals",
            "completed": "/goals/completed",
            "toggle": "/goals/{id}/toggle",
            "restore": "/goals/completed/{id}/restore",
            "steps": "/goals/{id}/steps",
            "timer": "/goals/timer",
            "streak": "/goals/streak",
            "stats": "/goals/stats",
        },
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
