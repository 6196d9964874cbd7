"""In-process event hub for engine notifications (goal_completed, ...)."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from typing import Any

EventHandler = Callable[[dict[str, Any]], None]

GOAL_ADDED = "goal_added"
GOAL_COMPLETED = "goal_completed"
GOAL_RESTORED = "goal_restored"
GOAL_DELETED = "goal_deleted"
TIMER_STARTED = "timer_started"
TIMER_STOPPED = "timer_stopped"
PERSISTENCE_FAILED = "persistence_failed"


class EventBus:
    """Dispatches events to subscribers by event name."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        self._handlers[event_name].append(handler)

    def unsubscribe(self, event_name: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_name, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event_name: str, payload: dict[str, Any]) -> None:
        for handler in list(self._handlers.get(event_name, [])):
            handler(payload)
