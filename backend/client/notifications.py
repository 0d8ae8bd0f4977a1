"""
Publish/subscribe channel for user-facing notifications (toasts).

A NotificationBus is created by the application and handed to whatever needs
to publish or display notifications; there is no module-level instance.
"""

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict

logger = logging.getLogger(__name__)

LEVELS = ("info", "success", "error")


@dataclass(frozen=True)
class Notification:
    id: int
    message: str
    level: str = "info"


Listener = Callable[[Notification], None]


class NotificationBus:
    """Explicit subscribe/unsubscribe notification channel."""

    def __init__(self):
        self._listeners: Dict[int, Listener] = {}
        self._ids = itertools.count(1)
        self._tokens = itertools.count(1)
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register ``listener``.

        Returns:
            A callable that unsubscribes the listener (safe to call twice).
        """
        with self._lock:
            token = next(self._tokens)
            self._listeners[token] = listener

        def unsubscribe():
            with self._lock:
                self._listeners.pop(token, None)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def publish(self, message: str, level: str = "info") -> Notification:
        """Deliver a notification to every current listener."""
        if level not in LEVELS:
            raise ValueError(f"Unknown notification level '{level}'")

        with self._lock:
            notification = Notification(id=next(self._ids), message=message, level=level)
            listeners = list(self._listeners.values())

        for listener in listeners:
            try:
                listener(notification)
            except Exception as e:
                logger.error(f"Notification listener failed: {e}", exc_info=True)
        return notification

    def info(self, message: str) -> Notification:
        return self.publish(message, "info")

    def success(self, message: str) -> Notification:
        return self.publish(message, "success")

    def error(self, message: str) -> Notification:
        return self.publish(message, "error")
