"""Binder event notifications.

Listeners are plain callables invoked synchronously on the event loop
thread. A failing listener is logged and skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

logger = logging.getLogger(__name__)

LOADED = "loaded"
SAVED = "saved"
TIMED_SAVE_FAILED = "timed_save_failed"
EVICTED = "evicted"
EVICTION_FAILED = "eviction_failed"
SHUTDOWN = "shutdown"


@dataclass
class BinderEvent:
    kind: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)


Listener = Callable[[BinderEvent], None]


class EventBus:
    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; the returned callable unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, kind: str, **payload: Any) -> BinderEvent:
        event = BinderEvent(kind, payload)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error("Event listener failed on %s: %s", kind, e)
        return event
