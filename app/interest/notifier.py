"""Same-session broadcast of interest changes.

Components that display the same event subscribe here to follow toggles
made elsewhere. Delivery is best-effort: nothing relies on it for
correctness, the cache and the server remain the sources of truth.
"""
import logging
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InterestChanged:
    event_id: int
    interested: bool


Subscriber = Callable[[InterestChanged], None]


class InterestNotifier:
    def __init__(self):
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback. Returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, change: InterestChanged) -> None:
        for callback in list(self._subscribers):
            try:
                callback(change)
            except Exception:
                logger.exception(f"Interest subscriber failed for event {change.event_id}")
