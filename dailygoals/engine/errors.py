"""Engine error taxonomy."""

from __future__ import annotations


class GoalEngineError(Exception):
    """Base class for every error raised by the goal engine."""


class InvalidInput(GoalEngineError):
    """Bad arguments (e.g. blank title). Raised before any state change."""


class NotFound(GoalEngineError):
    """A strict command referenced an id that is not in the expected set."""

    def __init__(self, kind: str, item_id: object) -> None:
        super().__init__(f"Unknown {kind}: {item_id}")
        self.kind = kind
        self.item_id = item_id


class PersistenceFailure(GoalEngineError):
    """The store could not write state. Never fatal to the engine."""
