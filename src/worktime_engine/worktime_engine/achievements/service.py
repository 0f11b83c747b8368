from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..common.events import Event
from ..core.constants import STREAK_LOOKBACK_DAYS
from ..settings.provider import SettingsProvider
from ..workdays.repository import RecordStore
from .catalog import DEFINITIONS, definition_for, new_achievement, progress_text
from .model import Achievement, AchievementView
from .progress import ProgressDataLoader, calculate_streak, compute_progress

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AchievementService:
    """Evaluates pending achievements from one shared data load per check."""

    def __init__(
        self,
        store: RecordStore,
        settings: SettingsProvider,
        *,
        clock: Callable[[], datetime] = now_local,
        utc_clock: Callable[[], datetime] = _utc_now,
    ):
        self._store = store
        self._settings = settings
        self._clock = clock
        self._utc_clock = utc_clock
        self._loader = ProgressDataLoader(store)
        self.achievement_unlocked = Event("achievement_unlocked")

    def initialize(self) -> int:
        """Insert catalog rows that are not stored yet; returns how many were added."""
        existing = {a.key for a in self._store.get_all_achievements()}
        added = 0
        for definition in DEFINITIONS:
            if definition.key not in existing:
                self._store.save_achievement(new_achievement(definition))
                added += 1
        if added:
            logger.info("Initialized %d achievements", added)
        return added

    def check_achievements(self, today: Optional[date] = None) -> list[Achievement]:
        """Update progress of locked achievements; returns the newly unlocked ones."""
        today = today or self._clock().date()
        settings = self._settings.get_settings()

        pending = [a for a in self._store.get_all_achievements() if not a.is_unlocked]
        if not pending:
            return []

        data = self._loader.load((a.key for a in pending), today)
        unlocked: list[Achievement] = []

        for achievement in pending:
            progress = compute_progress(achievement.key, data, settings)
            if progress is None:
                logger.debug("No metric for achievement %s", achievement.key)
                continue

            if progress >= achievement.target:
                updated = replace(
                    achievement,
                    progress=achievement.target,
                    is_unlocked=True,
                    unlocked_at=self._utc_clock(),
                )
            elif progress != achievement.progress:
                updated = replace(achievement, progress=progress)
            else:
                continue

            saved = self._store.save_achievement(updated)
            if saved.is_unlocked:
                logger.info("Achievement unlocked: %s", saved.key)
                unlocked.append(saved)
                self.achievement_unlocked.emit(saved)

        return unlocked

    def get_current_streak(self, today: Optional[date] = None) -> int:
        today = today or self._clock().date()
        days = self._store.get_work_days(today - timedelta(days=STREAK_LOOKBACK_DAYS), today)
        return calculate_streak(days, today, self._settings.get_settings())

    def get_all(self) -> list[AchievementView]:
        """Unlocked first (latest unlock first), then by progress percent."""
        achievements = list(self._store.get_all_achievements())
        achievements.sort(
            key=lambda a: (
                not a.is_unlocked,
                -_timestamp(a.unlocked_at),
                -a.progress_percent,
            )
        )
        return [self._view(a) for a in achievements]

    def get_unlocked(self) -> list[AchievementView]:
        return [v for v in self.get_all() if v.achievement.is_unlocked]

    @staticmethod
    def _view(achievement: Achievement) -> AchievementView:
        definition = definition_for(achievement.key)
        return AchievementView(
            achievement=achievement,
            name=definition.name if definition else achievement.key,
            description=definition.description if definition else "",
            progress_text=progress_text(achievement),
        )


def _timestamp(value: Optional[datetime]) -> float:
    if value is None:
        return 0.0
    if value.tzinfo is None:
        # Stored DATETIME columns come back naive; they hold UTC.
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()
