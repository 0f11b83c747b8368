from __future__ import annotations

import threading
from typing import Optional, Protocol

from .model import WorkSettings


class SettingsProvider(Protocol):
    def get_settings(self) -> WorkSettings:
        raise NotImplementedError


class StaticSettingsProvider:
    """Holds one immutable WorkSettings value; swapped only via replace()."""

    def __init__(self, settings: Optional[WorkSettings] = None):
        self._settings = settings or WorkSettings()
        self._lock = threading.Lock()

    def get_settings(self) -> WorkSettings:
        return self._settings

    def replace(self, settings: WorkSettings) -> None:
        settings.validate()
        with self._lock:
            self._settings = settings
