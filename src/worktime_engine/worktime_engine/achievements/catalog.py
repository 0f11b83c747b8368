from __future__ import annotations

from typing import Optional

from ..core.enums import AchievementCategory
from .model import Achievement, AchievementDefinition

HOURS_METRICS = frozenset({"hours_100", "hours_500", "hours_1000"})
STREAK_METRICS = frozenset({"streak_7", "streak_30", "streak_100"})

DEFINITIONS: tuple[AchievementDefinition, ...] = (
    AchievementDefinition("hours_100", AchievementCategory.HOURS, 6000, "100 Hours", "Work 100 hours total", True),
    AchievementDefinition("hours_500", AchievementCategory.HOURS, 30000, "500 Hours", "Work 500 hours total", True),
    AchievementDefinition("hours_1000", AchievementCategory.HOURS, 60000, "1000 Hours", "Work 1000 hours total", True),
    AchievementDefinition("streak_7", AchievementCategory.STREAK, 7, "7-Day Streak", "Work 7 consecutive days"),
    AchievementDefinition("streak_30", AchievementCategory.STREAK, 30, "30-Day Streak", "Work 30 consecutive days"),
    AchievementDefinition("streak_100", AchievementCategory.STREAK, 100, "100-Day Streak", "Work 100 consecutive days"),
    AchievementDefinition(
        "perfect_week", AchievementCategory.CONSISTENCY, 1, "Perfect Week", "Complete a week exactly on target"
    ),
    AchievementDefinition(
        "no_absence_month", AchievementCategory.CONSISTENCY, 1, "No Absence Month", "Zero absence days in a month"
    ),
    AchievementDefinition("early_bird", AchievementCategory.HABIT, 10, "Early Bird", "Check in before 8:00 ten times"),
    AchievementDefinition("night_owl", AchievementCategory.HABIT, 10, "Night Owl", "Check out after 20:00 ten times"),
    AchievementDefinition(
        "overtime_king", AchievementCategory.OVERTIME, 3000, "Overtime King", "Accumulate 50 hours of overtime", True
    ),
    AchievementDefinition(
        "marathon", AchievementCategory.MILESTONE, 600, "Marathon Day", "Work 10+ hours in a single day", True
    ),
    AchievementDefinition("half_year", AchievementCategory.MILESTONE, 130, "Half Year", "Log 130 work days"),
    AchievementDefinition("full_year", AchievementCategory.MILESTONE, 250, "Full Year", "Log 250 work days"),
    AchievementDefinition("pause_master", AchievementCategory.HABIT, 50, "Pause Master", "Take 50 breaks"),
)

_BY_KEY = {d.key: d for d in DEFINITIONS}


def definition_for(key: str) -> Optional[AchievementDefinition]:
    return _BY_KEY.get(key)


def new_achievement(definition: AchievementDefinition) -> Achievement:
    return Achievement(key=definition.key, category=definition.category, target=definition.target)


def progress_text(achievement: Achievement) -> str:
    definition = definition_for(achievement.key)
    if definition is not None and definition.shown_in_hours:
        return f"{achievement.progress // 60}/{achievement.target // 60}h"
    return f"{achievement.progress}/{achievement.target}"
