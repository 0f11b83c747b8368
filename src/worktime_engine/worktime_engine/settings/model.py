from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import date, time
from typing import Any, Mapping, Sequence

from ..common.datetime_utils import parse_time_of_day
from ..common.validators import require_non_negative, require_range, require_weekday
from ..core.constants import (
    LEGAL_PAUSE_30_AFTER_MINUTES,
    LEGAL_PAUSE_30_MINUTES,
    LEGAL_PAUSE_45_AFTER_MINUTES,
    LEGAL_PAUSE_45_MINUTES,
)
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class PauseBand:
    """From `after_minutes` of gross work on, at least `pause_minutes` of pause are due."""

    after_minutes: int
    pause_minutes: int


DEFAULT_PAUSE_BANDS = (
    PauseBand(LEGAL_PAUSE_30_AFTER_MINUTES, LEGAL_PAUSE_30_MINUTES),
    PauseBand(LEGAL_PAUSE_45_AFTER_MINUTES, LEGAL_PAUSE_45_MINUTES),
)

_TIME_FIELDS = {"morning_reminder_time", "evening_reminder_time"}


@dataclass(frozen=True)
class WorkSettings:
    """User configuration read by every computation.

    Weekdays follow `date.weekday()`: Monday is 0, Sunday is 6.
    """

    work_days: frozenset[int] = frozenset({0, 1, 2, 3, 4})
    daily_minutes: tuple[int, ...] = (480, 480, 480, 480, 480, 0, 0)

    auto_pause_enabled: bool = True
    pause_bands: tuple[PauseBand, ...] = DEFAULT_PAUSE_BANDS
    rounding_minutes: int = 0

    legal_compliance_enabled: bool = True
    max_daily_hours: float = 10
    min_rest_hours: float = 11

    morning_reminder_enabled: bool = True
    morning_reminder_time: time = time(7, 30)
    evening_reminder_enabled: bool = True
    evening_reminder_time: time = time(18, 0)
    pause_reminder_enabled: bool = True
    pause_reminder_after_hours: float = 6
    overtime_warning_enabled: bool = True
    weekly_summary_enabled: bool = True

    def is_work_day(self, value: date | int) -> bool:
        weekday = value if isinstance(value, int) else value.weekday()
        return weekday in self.work_days

    def daily_minutes_for(self, value: date | int) -> int:
        weekday = value if isinstance(value, int) else value.weekday()
        if weekday not in self.work_days:
            return 0
        return int(self.daily_minutes[weekday])

    def with_changes(self, **changes: Any) -> "WorkSettings":
        merged = {f.name: getattr(self, f.name) for f in fields(self)}
        unknown = set(changes) - set(merged)
        if unknown:
            raise ValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")
        merged.update(changes)
        return WorkSettings.from_mapping(merged)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "WorkSettings":
        """Build validated settings from a config dict (strings are accepted for env values)."""
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known or value is None:
                continue
            if key == "work_days":
                kwargs[key] = _parse_work_days(value)
            elif key == "daily_minutes":
                kwargs[key] = _parse_daily_minutes(value)
            elif key == "pause_bands":
                kwargs[key] = _parse_pause_bands(value)
            elif key in _TIME_FIELDS:
                kwargs[key] = value if isinstance(value, time) else parse_time_of_day(str(value))
            elif key.endswith("_enabled"):
                kwargs[key] = _parse_bool(value)
            else:
                kwargs[key] = float(value) if key.endswith("_hours") else int(value)

        settings = replace(cls(), **kwargs)
        settings.validate()
        return settings

    def validate(self) -> None:
        require_range(self.rounding_minutes, "rounding_minutes", 0, 60)
        require_range(self.max_daily_hours, "max_daily_hours", 1, 24)
        require_range(self.min_rest_hours, "min_rest_hours", 0, 24)
        require_range(self.pause_reminder_after_hours, "pause_reminder_after_hours", 0, 24)
        if len(self.daily_minutes) != 7:
            raise ValidationError("daily_minutes needs one value per weekday")
        for minutes in self.daily_minutes:
            require_range(minutes, "daily_minutes", 0, 24 * 60)
        for band in self.pause_bands:
            require_non_negative(band.after_minutes, "pause band threshold")
            require_non_negative(band.pause_minutes, "pause band minutes")


def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _parse_work_days(value: Any) -> frozenset[int]:
    if isinstance(value, str):
        value = [part for part in value.split(",") if part.strip()]
    return frozenset(require_weekday(int(v), "work_days") for v in value)


def _parse_daily_minutes(value: Any) -> tuple[int, ...]:
    if isinstance(value, str) and "," in value:
        value = value.split(",")
    if isinstance(value, (int, float, str)):
        minutes = int(value)
        # A single value applies to Monday..Friday; weekend targets stay 0.
        return tuple(minutes if weekday < 5 else 0 for weekday in range(7))
    return tuple(int(v) for v in value)


def _parse_pause_bands(value: Sequence[Any]) -> tuple[PauseBand, ...]:
    bands = []
    for item in value:
        if isinstance(item, PauseBand):
            bands.append(item)
        elif isinstance(item, Mapping):
            bands.append(PauseBand(int(item["after_minutes"]), int(item["pause_minutes"])))
        else:
            after, pause = item
            bands.append(PauseBand(int(after), int(pause)))
    return tuple(sorted(bands, key=lambda b: b.after_minutes))
