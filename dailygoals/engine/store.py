"""Persistence for the goal engine — three JSON records in one data directory.

    goals.json            active goals, insertion order
    completed_goals.json  completed archive, most-recent-first
    settings.json         {"streak": int, "last_completion_date": ts | null}

`load` never raises: a missing or unreadable file means "no prior data".
`save` writes all three records and raises PersistenceFailure on I/O error.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Protocol

from pydantic import TypeAdapter, ValidationError

from dailygoals.engine.errors import PersistenceFailure
from dailygoals.engine.models import Goal, StreakState

logger = logging.getLogger(__name__)

GOALS_FILE = "goals.json"
COMPLETED_FILE = "completed_goals.json"
SETTINGS_FILE = "settings.json"

_goal_list = TypeAdapter(list[Goal])

Snapshot = tuple[list[Goal], list[Goal], StreakState]


class GoalStore(Protocol):
    def load(self) -> Snapshot: ...

    def save(self, active: list[Goal], completed: list[Goal], streak: StreakState) -> None: ...


class JsonGoalStore:
    """File-backed store. Writes are serialized and each file is replaced atomically."""

    def __init__(self, data_dir: str | os.PathLike[str]) -> None:
        self.data_dir = Path(data_dir).expanduser()
        self._lock = threading.Lock()

    # -- load ---------------------------------------------------------------

    def load(self) -> Snapshot:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Could not create data dir %s: %s", self.data_dir, e)

        active = self._read(GOALS_FILE, _goal_list.validate_json, [])
        completed = self._read(COMPLETED_FILE, _goal_list.validate_json, [])
        streak = self._read(SETTINGS_FILE, StreakState.model_validate_json, StreakState())
        logger.info(
            "Loaded %d active, %d completed goals (streak=%d) from %s",
            len(active), len(completed), streak.streak, self.data_dir,
        )
        return active, completed, streak

    def _read(self, name: str, parse, default):
        path = self.data_dir / name
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return default
        except OSError as e:
            logger.warning("Could not read %s: %s", path, e)
            return default
        try:
            return parse(raw)
        except ValidationError as e:
            logger.warning("Ignoring corrupt %s (%d errors)", path, e.error_count())
            return default

    # -- save ---------------------------------------------------------------

    def save(self, active: list[Goal], completed: list[Goal], streak: StreakState) -> None:
        payloads = {
            GOALS_FILE: _goal_list.dump_json(active, indent=2),
            COMPLETED_FILE: _goal_list.dump_json(completed, indent=2),
            SETTINGS_FILE: streak.model_dump_json(indent=2).encode(),
        }
        with self._lock:
            try:
                self.data_dir.mkdir(parents=True, exist_ok=True)
                for name, data in payloads.items():
                    self._write_atomic(self.data_dir / name, data)
            except OSError as e:
                raise PersistenceFailure(f"Could not write to {self.data_dir}: {e}") from e

    @staticmethod
    def _write_atomic(path: Path, data: bytes) -> None:
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp, path)
        except OSError:
            Path(tmp).unlink(missing_ok=True)
            raise


class InMemoryStore:
    """Non-durable store with the same contract; keeps deep copies."""

    def __init__(
        self,
        active: list[Goal] | None = None,
        completed: list[Goal] | None = None,
        streak: StreakState | None = None,
    ) -> None:
        self.active = list(active or [])
        self.completed = list(completed or [])
        self.streak = streak or StreakState()
        self.saves = 0

    def load(self) -> Snapshot:
        return (
            [g.model_copy(deep=True) for g in self.active],
            [g.model_copy(deep=True) for g in self.completed],
            self.streak.model_copy(),
        )

    def save(self, active: list[Goal], completed: list[Goal], streak: StreakState) -> None:
        self.active = [g.model_copy(deep=True) for g in active]
        self.completed = [g.model_copy(deep=True) for g in completed]
        self.streak = streak.model_copy()
        self.saves += 1
