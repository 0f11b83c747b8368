from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class OneShotTimer:
    """Run a callback once after a delay on a daemon thread.

    A delay that is already due fires synchronously inside start(). cancel()
    is idempotent and the cancel flag is checked again right before the
    callback, so a cancelled timer never delivers.
    """

    def __init__(self, delay_seconds: float, callback: Callable[[], None], *, name: str = "timer"):
        self.name = name
        self._delay = max(0.0, float(delay_seconds))
        self._callback = callback
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._fired = False
        self._thread: Optional[threading.Thread] = None

    @property
    def delay_seconds(self) -> float:
        return self._delay

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def has_fired(self) -> bool:
        return self._fired

    @property
    def is_pending(self) -> bool:
        return not self._fired and not self._cancelled.is_set()

    def start(self) -> "OneShotTimer":
        if self._thread is not None or self._fired:
            return self
        if self._delay <= 0:
            self._fire()
            return self
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        return self

    def cancel(self) -> None:
        with self._lock:
            self._cancelled.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def _run(self) -> None:
        if self._cancelled.wait(self._delay):
            return
        self._fire()

    def _fire(self) -> None:
        with self._lock:
            if self._cancelled.is_set() or self._fired:
                return
            self._fired = True
        try:
            self._callback()
        except Exception:
            logger.exception("Timer %s callback failed", self.name)
