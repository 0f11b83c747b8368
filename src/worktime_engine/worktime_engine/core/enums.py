from __future__ import annotations

from enum import Enum


class TrackingStatus(str, Enum):
    """Live tracking state of the engine."""

    IDLE = "IDLE"
    WORKING = "WORKING"
    ON_BREAK = "ON_BREAK"


class DayStatus(str, Enum):
    """Classification of a calendar day stored on the work day row."""

    WORK_DAY = "WORK_DAY"
    WEEKEND = "WEEKEND"
    VACATION = "VACATION"
    SICK = "SICK"
    HOLIDAY = "HOLIDAY"
    HOME_OFFICE = "HOME_OFFICE"
    BUSINESS_TRIP = "BUSINESS_TRIP"
    OVERTIME_COMPENSATION = "OVERTIME_COMPENSATION"
    SPECIAL_LEAVE = "SPECIAL_LEAVE"
    UNPAID_LEAVE = "UNPAID_LEAVE"
    TRAINING = "TRAINING"
    COMPENSATORY_TIME = "COMPENSATORY_TIME"


class EntryType(str, Enum):
    CHECK_IN = "CHECK_IN"
    CHECK_OUT = "CHECK_OUT"


class PauseType(str, Enum):
    MANUAL = "MANUAL"
    AUTO = "AUTO"


class ComplianceKind(str, Enum):
    """Working-time-law findings raised for a single day."""

    DAILY_HOURS_EXCEEDED = "DAILY_HOURS_EXCEEDED"
    MIN_PAUSE_30 = "MIN_PAUSE_30"
    MIN_PAUSE_45 = "MIN_PAUSE_45"
    REST_TIME_VIOLATION = "REST_TIME_VIOLATION"


class AchievementCategory(str, Enum):
    HOURS = "HOURS"
    STREAK = "STREAK"
    CONSISTENCY = "CONSISTENCY"
    HABIT = "HABIT"
    OVERTIME = "OVERTIME"
    MILESTONE = "MILESTONE"
