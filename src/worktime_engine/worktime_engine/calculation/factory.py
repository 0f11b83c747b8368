from __future__ import annotations

from dataclasses import dataclass

from ..settings.model import WorkSettings
from .policies.banded_policy import BandedPausePolicy
from .policies.base import PausePolicy
from .policies.disabled_policy import NoAutoPausePolicy


@dataclass
class PausePolicyFactory:
    """Factory Pattern: choose the pause policy for the current settings."""

    def for_settings(self, settings: WorkSettings) -> PausePolicy:
        if not settings.auto_pause_enabled:
            return NoAutoPausePolicy()
        return BandedPausePolicy(settings.pause_bands)
