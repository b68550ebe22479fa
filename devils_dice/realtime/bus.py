"""
Devil's Dice - In-process Event Bus

Fans engine events out to whoever is listening. The engine publishes; the
presentation layer, a broadcaster, or tests subscribe.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable

from devils_dice.realtime.events import EventPayload, GameEvent

logger = logging.getLogger(__name__)

Subscriber = Callable[[EventPayload], None]


class EventBus:
    """Synchronous publish/subscribe for one table.

    Subscribers run in registration order on the publishing thread. A
    subscriber that raises is logged and skipped; it never interrupts the
    engine or the other subscribers.
    """

    def __init__(self, history_size: int = 500) -> None:
        self._subscribers: list[Subscriber] = []
        self._history: deque[EventPayload] = deque(maxlen=history_size)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback. Returns a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, payload: EventPayload) -> None:
        """Record an event and deliver it to every subscriber."""
        self._history.append(payload)
        for callback in list(self._subscribers):
            try:
                callback(payload)
            except Exception:
                logger.exception(
                    "Subscriber %r failed on %s", callback, payload.event.name
                )

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def history(self) -> list[EventPayload]:
        """Most recent events, oldest first."""
        return list(self._history)

    def events_of(self, event: GameEvent) -> list[EventPayload]:
        """Recorded payloads of one event type."""
        return [p for p in self._history if p.event is event]

    def clear_history(self) -> None:
        self._history.clear()
