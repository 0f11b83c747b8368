"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time, timedelta

from .enums import DayStatus

DUPLICATE_PRESS_SECONDS = 10

# A pause longer than this is treated as corrupt data and counts as zero.
MAX_PLAUSIBLE_PAUSE = timedelta(hours=12)

LEGAL_PAUSE_30_AFTER_MINUTES = 6 * 60
LEGAL_PAUSE_30_MINUTES = 30
LEGAL_PAUSE_45_AFTER_MINUTES = 9 * 60
LEGAL_PAUSE_45_MINUTES = 45

CUMULATIVE_FALLBACK_DAYS = 365

STREAK_LOOKBACK_DAYS = 120
ACHIEVEMENT_LOOKBACK_DAYS = 365
PERFECT_WEEK_LOOKBACK_WEEKS = 52
PERFECT_WEEK_MIN_DAYS = 3
PERFECT_WEEK_MAX_DEVIATION_MINUTES = 30
NO_ABSENCE_MIN_DAYS = 5
EARLY_BIRD_BEFORE = time(8, 0)
NIGHT_OWL_FROM = time(20, 0)

MORNING_REMINDER_ID = "reminder_morning"
EVENING_REMINDER_ID = "reminder_evening"
PAUSE_REMINDER_ID = "reminder_pause"
OVERTIME_REMINDER_ID = "reminder_overtime"
WEEKLY_SUMMARY_ID = "reminder_weekly"

ALL_REMINDER_IDS = (
    MORNING_REMINDER_ID,
    EVENING_REMINDER_ID,
    PAUSE_REMINDER_ID,
    OVERTIME_REMINDER_ID,
    WEEKLY_SUMMARY_ID,
)

ABSENCE_STATUSES = frozenset(
    {
        DayStatus.VACATION,
        DayStatus.SICK,
        DayStatus.UNPAID_LEAVE,
        DayStatus.SPECIAL_LEAVE,
        DayStatus.COMPENSATORY_TIME,
    }
)

# Days with these statuses carry no target: they are credited or unpaid.
TARGET_FREE_STATUSES = frozenset(
    {
        DayStatus.VACATION,
        DayStatus.SICK,
        DayStatus.HOLIDAY,
        DayStatus.SPECIAL_LEAVE,
        DayStatus.UNPAID_LEAVE,
    }
)
