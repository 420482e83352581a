"""
Transient header notifications ("Flow saved successfully!", connection errors).

Each notification clears itself after a timeout. The clear is a cancellable
deferred task scoped to the notification it was scheduled for: raising a new
notification cancels the pending clear, and a clear that fires anyway only
removes the notification it belongs to.
"""

import asyncio
import itertools
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

logger = logging.getLogger(__name__)

NOTIFICATION_TIMEOUT_MS = 3000

SUCCESS = "success"
ERROR = "error"


class Cancellable(Protocol):
    def cancel(self) -> None:
        ...


# scheduler(delay_seconds, callback) -> handle with cancel()
Scheduler = Callable[[float, Callable[[], None]], Cancellable]


def asyncio_scheduler(delay: float, callback: Callable[[], None]) -> Cancellable:
    """Default scheduler. Must be called from inside a running event loop."""
    return asyncio.get_running_loop().call_later(delay, callback)


@dataclass(frozen=True)
class Notification:
    id: int
    kind: str  # 'success' | 'error'
    text: str


class NotificationCenter:
    """Holds at most one visible notification and its pending auto-clear."""

    def __init__(self, scheduler: Scheduler = None, timeout_ms: int = NOTIFICATION_TIMEOUT_MS):
        self._scheduler = scheduler or asyncio_scheduler
        self.timeout_ms = timeout_ms
        self._ids = itertools.count(1)
        self._current: Optional[Notification] = None
        self._pending: Optional[Cancellable] = None
        self._listeners: List[Callable[[Optional[Notification]], None]] = []

    @property
    def current(self) -> Optional[Notification]:
        return self._current

    def subscribe(self, callback: Callable[[Optional[Notification]], None]) -> None:
        self._listeners.append(callback)

    def _set(self, notification: Optional[Notification]) -> None:
        self._current = notification
        for callback in list(self._listeners):
            callback(notification)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def notify(self, kind: str, text: str) -> Notification:
        self._cancel_pending()
        notification = Notification(id=next(self._ids), kind=kind, text=text)
        self._set(notification)
        self._pending = self._scheduler(
            self.timeout_ms / 1000,
            lambda: self._expire(notification.id),
        )
        return notification

    def success(self, text: str) -> Notification:
        return self.notify(SUCCESS, text)

    def error(self, text: str) -> Notification:
        return self.notify(ERROR, text)

    def _expire(self, notification_id: int) -> None:
        if self._current is None or self._current.id != notification_id:
            logger.debug(f"Stale clear for notification {notification_id} ignored")
            return
        self._pending = None
        self._set(None)

    def dismiss(self) -> None:
        self._cancel_pending()
        if self._current is not None:
            self._set(None)
