from __future__ import annotations

from datetime import time

import pytest

from worktime_engine.core.exceptions import ValidationError
from worktime_engine.settings.model import DEFAULT_PAUSE_BANDS, PauseBand, WorkSettings
from worktime_engine.settings.provider import StaticSettingsProvider


def test_defaults():
    settings = WorkSettings()

    assert settings.work_days == frozenset({0, 1, 2, 3, 4})
    assert settings.daily_minutes_for(0) == 480
    assert settings.daily_minutes_for(5) == 0
    assert settings.pause_bands == DEFAULT_PAUSE_BANDS
    assert settings.morning_reminder_time == time(7, 30)


def test_from_mapping_parses_env_strings():
    settings = WorkSettings.from_mapping(
        {
            "work_days": "0,1,2,3",
            "daily_minutes": "450",
            "auto_pause_enabled": "no",
            "rounding_minutes": "15",
            "max_daily_hours": "9.5",
            "morning_reminder_time": "08:15",
            "weekly_summary_enabled": "TRUE",
            "unrelated": "ignored",
        }
    )

    assert settings.work_days == frozenset({0, 1, 2, 3})
    assert settings.daily_minutes == (450, 450, 450, 450, 450, 0, 0)
    # Friday is no longer a work day, so its target is 0 even though configured.
    assert settings.daily_minutes_for(4) == 0
    assert settings.auto_pause_enabled is False
    assert settings.rounding_minutes == 15
    assert settings.max_daily_hours == 9.5
    assert settings.morning_reminder_time == time(8, 15)
    assert settings.weekly_summary_enabled is True


def test_from_mapping_accepts_lists_and_bands():
    settings = WorkSettings.from_mapping(
        {
            "daily_minutes": [480, 480, 480, 480, 300, 0, 0],
            "pause_bands": [{"after_minutes": 540, "pause_minutes": 45}, (300, 20)],
        }
    )

    assert settings.daily_minutes_for(4) == 300
    assert settings.pause_bands == (PauseBand(300, 20), PauseBand(540, 45))


@pytest.mark.parametrize(
    "data",
    [
        {"work_days": "0,7"},
        {"daily_minutes": [480, 480]},
        {"rounding_minutes": 90},
        {"max_daily_hours": 30},
        {"pause_bands": [(-1, 30)]},
    ],
)
def test_invalid_values_are_rejected(data):
    with pytest.raises(ValidationError):
        WorkSettings.from_mapping(data)


def test_with_changes():
    settings = WorkSettings().with_changes(evening_reminder_time="17:30", pause_reminder_enabled=False)

    assert settings.evening_reminder_time == time(17, 30)
    assert settings.pause_reminder_enabled is False

    with pytest.raises(ValidationError):
        settings.with_changes(coffee_breaks=3)


def test_provider_replace():
    provider = StaticSettingsProvider()
    updated = WorkSettings(rounding_minutes=5)

    provider.replace(updated)

    assert provider.get_settings() is updated


def test_provider_rejects_invalid_settings():
    provider = StaticSettingsProvider()

    with pytest.raises(ValidationError):
        provider.replace(WorkSettings(rounding_minutes=-5))
    assert provider.get_settings().rounding_minutes == 0
