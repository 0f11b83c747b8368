from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


class Event:
    """Synchronous observer hook.

    Listeners run in registration order on the emitting thread. A listener
    that raises is logged and does not stop the others.
    """

    def __init__(self, name: str = "event"):
        self.name = name
        self._listeners: list[Callable[..., Any]] = []

    def add_listener(self, listener: Callable[..., Any]) -> None:
        if not callable(listener):
            raise ValueError("Listener must be callable")
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[..., Any]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def emit(self, *args: Any, **kwargs: Any) -> None:
        for listener in list(self._listeners):
            try:
                listener(*args, **kwargs)
            except Exception:
                logger.exception("Error in %s listener", self.name)
