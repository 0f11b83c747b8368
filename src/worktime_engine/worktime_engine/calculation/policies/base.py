from __future__ import annotations

from abc import ABC, abstractmethod


class PausePolicy(ABC):
    """Strategy Pattern: how much total pause a day of gross work requires."""

    @abstractmethod
    def required_pause_minutes(self, gross_minutes: int) -> int:
        raise NotImplementedError
