"""In-process change notification bus."""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

AIRCRAFT_UPDATED = "aircraft_updated"
POSITIONS_UPDATED = "positions_updated"
DOMES_UPDATED = "domes_updated"


class EventBus:
    """Synchronous event bus the store uses to announce published changes.

    Subscribers are called after the new collection is in place, so they
    always observe a complete batch.  Callbacks run outside the lock on a
    snapshot of the subscriber list; a failing callback is logged and does
    not stop the others.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._subscribers: dict[str, list[Callable]] = defaultdict(list)

    def subscribe(self, event: str, callback: Callable[..., Any]) -> None:
        with self._lock:
            self._subscribers[event].append(callback)

    def unsubscribe(self, event: str, callback: Callable[..., Any]) -> None:
        with self._lock:
            if callback in self._subscribers[event]:
                self._subscribers[event].remove(callback)

    def subscriber_count(self, event: str) -> int:
        with self._lock:
            return len(self._subscribers.get(event, []))

    def publish(self, event: str, **kwargs: Any) -> None:
        with self._lock:
            callbacks = list(self._subscribers.get(event, []))
        for callback in callbacks:
            try:
                callback(**kwargs)
            except Exception:
                logger.exception("EventBus callback error on '%s'", event)
