from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AchievementCategory


@dataclass(frozen=True)
class Achievement:
    """Stored progress of one catalog achievement."""

    key: str
    category: AchievementCategory
    target: int
    progress: int = 0
    is_unlocked: bool = False
    unlocked_at: Optional[datetime] = None

    @property
    def progress_percent(self) -> float:
        if self.target <= 0:
            return 100.0 if self.is_unlocked else 0.0
        return min(100.0, self.progress * 100.0 / self.target)


@dataclass(frozen=True)
class AchievementDefinition:
    key: str
    category: AchievementCategory
    target: int
    name: str
    description: str
    # Metrics counted in minutes are shown as whole hours.
    shown_in_hours: bool = False


@dataclass(frozen=True)
class AchievementView:
    """Read-model for presentation layers."""

    achievement: Achievement
    name: str
    description: str
    progress_text: str
