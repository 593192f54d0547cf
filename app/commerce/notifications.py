# app/commerce/notifications.py
"""
Transient user notifications ("toasts").

Remote errors during user-triggered actions are reported here instead of
breaking the page. A UI layer subscribes to render them; by default they
are only kept in a short ring buffer and logged.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Literal

logger = logging.getLogger(__name__)

Variant = Literal["default", "destructive"]


@dataclass(frozen=True)
class Notification:
    title: str
    description: str
    variant: Variant = "default"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class Notifier:
    def __init__(self, max_items: int = 20):
        self._items: deque[Notification] = deque(maxlen=max_items)
        self._listeners: list[Callable[[Notification], None]] = []

    def subscribe(self, listener: Callable[[Notification], None]) -> Callable[[], None]:
        """Register a listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _push(self, notification: Notification) -> Notification:
        self._items.append(notification)
        for listener in list(self._listeners):
            listener(notification)
        return notification

    def info(self, title: str, description: str) -> Notification:
        logger.info("%s: %s", title, description)
        return self._push(Notification(title, description))

    def error(self, title: str, description: str) -> Notification:
        logger.warning("%s: %s", title, description)
        return self._push(Notification(title, description, "destructive"))

    @property
    def items(self) -> list[Notification]:
        return list(self._items)

    def dismiss_all(self) -> None:
        self._items.clear()
