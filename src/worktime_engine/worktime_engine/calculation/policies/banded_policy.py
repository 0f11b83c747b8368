from __future__ import annotations

from typing import Sequence

from ...settings.model import DEFAULT_PAUSE_BANDS, PauseBand
from .base import PausePolicy


class BandedPausePolicy(PausePolicy):
    """Step function: the highest band whose threshold the gross time reaches wins."""

    def __init__(self, bands: Sequence[PauseBand] = DEFAULT_PAUSE_BANDS):
        self._bands = tuple(sorted(bands, key=lambda b: b.after_minutes))

    @property
    def bands(self) -> tuple[PauseBand, ...]:
        return self._bands

    def required_pause_minutes(self, gross_minutes: int) -> int:
        required = 0
        for band in self._bands:
            if gross_minutes >= band.after_minutes:
                required = max(required, band.pause_minutes)
        return required
