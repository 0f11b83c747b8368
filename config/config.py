"""Environment readers shared by the settings modules."""

import os


def db_config_from_env(*, default_database: str = "worktime_db") -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", ""),
        "database": os.getenv("DB_NAME", default_database),
    }


# Env variable -> WorkSettings field. Values stay strings; WorkSettings.from_mapping parses them.
_WORK_SETTINGS_ENV = {
    "WORK_DAYS": "work_days",
    "WORK_DAILY_MINUTES": "daily_minutes",
    "WORK_AUTO_PAUSE": "auto_pause_enabled",
    "WORK_ROUNDING_MINUTES": "rounding_minutes",
    "WORK_LEGAL_COMPLIANCE": "legal_compliance_enabled",
    "WORK_MAX_DAILY_HOURS": "max_daily_hours",
    "WORK_MIN_REST_HOURS": "min_rest_hours",
    "REMINDER_MORNING": "morning_reminder_enabled",
    "REMINDER_MORNING_TIME": "morning_reminder_time",
    "REMINDER_EVENING": "evening_reminder_enabled",
    "REMINDER_EVENING_TIME": "evening_reminder_time",
    "REMINDER_PAUSE": "pause_reminder_enabled",
    "REMINDER_PAUSE_AFTER_HOURS": "pause_reminder_after_hours",
    "REMINDER_OVERTIME": "overtime_warning_enabled",
    "REMINDER_WEEKLY": "weekly_summary_enabled",
}


def work_settings_from_env() -> dict:
    return {field: os.environ[name] for name, field in _WORK_SETTINGS_ENV.items() if name in os.environ}
