from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Optional, Protocol

from ..common.datetime_utils import now_local
from ..common.timers import OneShotTimer

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    """Delivery boundary for reminders (desktop toast, mobile push, ...)."""

    def show_notification(self, title: str, body: str, notification_id: Optional[str] = None) -> None:
        raise NotImplementedError

    def schedule_notification(self, notification_id: str, title: str, body: str, trigger_at: datetime) -> None:
        raise NotImplementedError

    def cancel_notification(self, notification_id: str) -> None:
        raise NotImplementedError


class LoggingNotificationSink(NotificationSink):
    """Delivers notifications to the log; scheduled ones wait on owned timers.

    Scheduling an id that is already pending replaces it. A trigger time that
    is not in the future is shown immediately.
    """

    def __init__(self, *, clock: Callable[[], datetime] = now_local, log: Optional[logging.Logger] = None):
        self._clock = clock
        self._log = log or logger
        self._timers: dict[str, OneShotTimer] = {}
        self._lock = threading.Lock()

    def show_notification(self, title: str, body: str, notification_id: Optional[str] = None) -> None:
        self._log.info("Notification [%s] %s: %s", notification_id or "-", title, body)

    def schedule_notification(self, notification_id: str, title: str, body: str, trigger_at: datetime) -> None:
        delay = (trigger_at - self._clock()).total_seconds()
        timer = OneShotTimer(
            delay,
            lambda: self._deliver(notification_id, title, body),
            name=f"notification-{notification_id}",
        )
        with self._lock:
            previous = self._timers.pop(notification_id, None)
            if previous is not None:
                previous.cancel()
            self._timers[notification_id] = timer
        self._log.debug("Scheduled %s for %s", notification_id, trigger_at.isoformat(timespec="minutes"))
        timer.start()

    def cancel_notification(self, notification_id: str) -> None:
        with self._lock:
            timer = self._timers.pop(notification_id, None)
        if timer is not None:
            timer.cancel()

    def is_scheduled(self, notification_id: str) -> bool:
        with self._lock:
            timer = self._timers.get(notification_id)
        return timer is not None and timer.is_pending

    def close(self) -> None:
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()

    def _deliver(self, notification_id: str, title: str, body: str) -> None:
        with self._lock:
            current = self._timers.get(notification_id)
            if current is not None and current.has_fired:
                del self._timers[notification_id]
        self.show_notification(title, body, notification_id)
