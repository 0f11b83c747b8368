from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import week_bounds
from ..core.constants import (
    ABSENCE_STATUSES,
    ACHIEVEMENT_LOOKBACK_DAYS,
    EARLY_BIRD_BEFORE,
    NIGHT_OWL_FROM,
    NO_ABSENCE_MIN_DAYS,
    PERFECT_WEEK_LOOKBACK_WEEKS,
    PERFECT_WEEK_MAX_DEVIATION_MINUTES,
    PERFECT_WEEK_MIN_DAYS,
    STREAK_LOOKBACK_DAYS,
)
from ..settings.model import WorkSettings
from ..workdays.model import WorkDay
from ..workdays.repository import RecordStore
from .catalog import HOURS_METRICS, STREAK_METRICS

DAY_LIST_METRICS = STREAK_METRICS | frozenset(
    {
        "perfect_week",
        "no_absence_month",
        "early_bird",
        "night_owl",
        "marathon",
        "half_year",
        "full_year",
        "pause_master",
    }
)


@dataclass(frozen=True)
class SharedProgressData:
    """Everything one achievement check needs, loaded up front."""

    today: date
    first_date: Optional[date] = None
    total_work_minutes: int = 0
    total_overtime_minutes: int = 0
    days: tuple[WorkDay, ...] = ()


class ProgressDataLoader:
    """Loads shared data for the pending metrics with at most one ranged day read."""

    def __init__(self, store: RecordStore):
        self._store = store

    def load(self, pending_keys: Iterable[str], today: date) -> SharedProgressData:
        keys = set(pending_keys)
        needs_hours = bool(keys & HOURS_METRICS)
        needs_overtime = "overtime_king" in keys
        needs_days = bool(keys & DAY_LIST_METRICS)
        if not (needs_hours or needs_overtime or needs_days):
            return SharedProgressData(today=today)

        first = self._store.get_first_work_day_date()
        total_work = 0
        total_overtime = 0
        if first is not None and first <= today:
            if needs_hours:
                total_work = self._store.get_total_work_minutes(first, today)
            if needs_overtime:
                total_overtime = self._store.get_total_overtime_minutes(first, today)

        days: tuple[WorkDay, ...] = ()
        if needs_days:
            start = today - timedelta(days=ACHIEVEMENT_LOOKBACK_DAYS)
            if first is not None and first < start:
                start = first
            days = tuple(self._store.get_work_days(start, today))

        return SharedProgressData(
            today=today,
            first_date=first,
            total_work_minutes=total_work,
            total_overtime_minutes=total_overtime,
            days=days,
        )


def calculate_streak(days: Sequence[WorkDay], today: date, settings: WorkSettings) -> int:
    """Consecutive worked days ending today, skipping non-work weekdays."""
    worked = {d.work_date for d in days if d.actual_minutes > 0}
    streak = 0
    current = today
    for _ in range(STREAK_LOOKBACK_DAYS):
        if settings.is_work_day(current):
            if current not in worked:
                break
            streak += 1
        current -= timedelta(days=1)
    return streak


def has_perfect_week(days: Sequence[WorkDay], today: date) -> bool:
    """True if a week of the last year (current week included) was on target.

    A week counts when it has at least 3 days with a target and the summed
    absolute balance of those days stays within 30 minutes.
    """
    by_date = {d.work_date: d for d in days}
    monday, _ = week_bounds(today)
    for weeks_back in range(PERFECT_WEEK_LOOKBACK_WEEKS):
        week_start = monday - timedelta(weeks=weeks_back)
        week_days = [
            by_date[week_start + timedelta(days=i)]
            for i in range(7)
            if week_start + timedelta(days=i) in by_date
        ]
        target_days = [d for d in week_days if d.target_minutes > 0]
        if len(target_days) < PERFECT_WEEK_MIN_DAYS:
            continue
        deviation = sum(abs(d.balance_minutes) for d in target_days)
        if deviation <= PERFECT_WEEK_MAX_DEVIATION_MINUTES:
            return True
    return False


def has_no_absence_month(days: Sequence[WorkDay], today: date) -> bool:
    month_start = today.replace(day=1)
    month_days = [d for d in days if month_start <= d.work_date <= today]
    if len(month_days) < NO_ABSENCE_MIN_DAYS:
        return False
    return not any(d.status in ABSENCE_STATUSES for d in month_days)


def _recent(days: Sequence[WorkDay], today: date) -> list[WorkDay]:
    since = today - timedelta(days=ACHIEVEMENT_LOOKBACK_DAYS)
    return [d for d in days if since <= d.work_date <= today]


def count_early_check_ins(days: Sequence[WorkDay], today: date, settings: WorkSettings) -> int:
    return sum(
        1
        for d in _recent(days, today)
        if settings.is_work_day(d.work_date)
        and d.actual_minutes > 0
        and d.first_check_in is not None
        and d.first_check_in.time() < EARLY_BIRD_BEFORE
    )


def count_late_check_outs(days: Sequence[WorkDay], today: date) -> int:
    return sum(
        1
        for d in _recent(days, today)
        if d.actual_minutes > 0 and d.last_check_out is not None and d.last_check_out.time() >= NIGHT_OWL_FROM
    )


def count_pause_days(days: Sequence[WorkDay], today: date) -> int:
    return sum(1 for d in _recent(days, today) if d.total_pause_minutes > 0)


def compute_progress(key: str, data: SharedProgressData, settings: WorkSettings) -> Optional[int]:
    """Current raw progress of a metric; None for keys without a metric."""
    if key in HOURS_METRICS:
        return data.total_work_minutes
    if key in STREAK_METRICS:
        return calculate_streak(data.days, data.today, settings)
    if key == "overtime_king":
        return max(0, data.total_overtime_minutes)
    if key == "perfect_week":
        return int(has_perfect_week(data.days, data.today))
    if key == "no_absence_month":
        return int(has_no_absence_month(data.days, data.today))
    if key == "early_bird":
        return count_early_check_ins(data.days, data.today, settings)
    if key == "night_owl":
        return count_late_check_outs(data.days, data.today)
    if key == "marathon":
        return max((d.actual_minutes for d in data.days), default=0)
    if key in ("half_year", "full_year"):
        return sum(1 for d in data.days if d.actual_minutes > 0)
    if key == "pause_master":
        return count_pause_days(data.days, data.today)
    return None
