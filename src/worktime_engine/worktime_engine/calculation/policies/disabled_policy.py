from __future__ import annotations

from .base import PausePolicy


class NoAutoPausePolicy(PausePolicy):
    """Auto-pause switched off: nothing is ever required."""

    def required_pause_minutes(self, gross_minutes: int) -> int:
        return 0
