from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import (
    first_day_of_iso_week,
    iter_days,
    minutes_between,
    month_bounds,
    now_local,
    round_to_granularity,
    week_bounds,
)
from ..core.constants import (
    CUMULATIVE_FALLBACK_DAYS,
    LEGAL_PAUSE_30_AFTER_MINUTES,
    LEGAL_PAUSE_30_MINUTES,
    LEGAL_PAUSE_45_AFTER_MINUTES,
    LEGAL_PAUSE_45_MINUTES,
    TARGET_FREE_STATUSES,
)
from ..core.enums import ComplianceKind, DayStatus, EntryType, PauseType
from ..settings.model import WorkSettings
from ..settings.provider import SettingsProvider
from ..workdays.model import PauseEntry, TimeEntry, WorkDay
from ..workdays.repository import RecordStore
from .factory import PausePolicyFactory
from .model import ComplianceFinding, PeriodTotals, WorkMonth, WorkWeek

logger = logging.getLogger(__name__)

AUTO_PAUSE_NOTE = "Automatic legal pause"


class CalculationService:
    """Turns stored entries into day totals and aggregates days into periods."""

    def __init__(
        self,
        store: RecordStore,
        settings: SettingsProvider,
        *,
        policy_factory: PausePolicyFactory | None = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._store = store
        self._settings = settings
        self._factory = policy_factory or PausePolicyFactory()
        self._clock = clock

    # -- single day --------------------------------------------------------

    def recalculate_work_day(
        self,
        day: WorkDay,
        *,
        include_running: bool = False,
        now: datetime | None = None,
    ) -> WorkDay:
        """Full recompute of one day; returns the saved day.

        `include_running` counts a trailing open check-in up to `now`. Callers
        pass it only while the day is still being worked.
        """
        if day.is_locked:
            logger.debug("Skipping recalculation of locked day %s", day.work_date)
            return day

        settings = self._settings.get_settings()
        entries = sorted(self._store.get_time_entries(day.work_day_id), key=lambda e: e.timestamp)
        pauses = list(self._store.get_pause_entries(day.work_day_id))
        target = self._target_for(day, settings)

        if not entries:
            for pause in pauses:
                if pause.is_auto_pause:
                    self._store.delete_pause_entry(pause.pause_id)
            updated = day.with_totals(
                actual_minutes=0,
                target_minutes=target,
                manual_pause_minutes=self._manual_pause_minutes(pauses),
                auto_pause_minutes=0,
                first_check_in=None,
                last_check_out=None,
            )
            return self._store.save_work_day(updated)

        first_in = next((e.timestamp for e in entries if e.entry_type == EntryType.CHECK_IN), None)
        last_out = next((e.timestamp for e in reversed(entries) if e.entry_type == EntryType.CHECK_OUT), None)

        running_until = (now or self._clock()) if include_running else None
        gross = self._gross_minutes(entries, running_until)
        manual, auto = self._apply_pauses(day, pauses, gross, last_out, settings)

        net = max(0, gross - manual - auto)
        if settings.rounding_minutes > 0:
            net = round_to_granularity(net, settings.rounding_minutes)

        updated = day.with_totals(
            actual_minutes=net,
            target_minutes=target,
            manual_pause_minutes=manual,
            auto_pause_minutes=auto,
            first_check_in=first_in,
            last_check_out=last_out,
        )
        saved = self._store.save_work_day(updated)
        logger.debug(
            "Recalculated %s: gross=%d manual=%d auto=%d net=%d balance=%d",
            day.work_date,
            gross,
            manual,
            auto,
            net,
            saved.balance_minutes,
        )
        return saved

    def recalculate_pause_time(
        self,
        day: WorkDay,
        *,
        include_running: bool = True,
        now: datetime | None = None,
    ) -> WorkDay:
        """Partial recompute after a pause ends: pause minutes and the auto pause only."""
        if day.is_locked:
            return day

        settings = self._settings.get_settings()
        entries = sorted(self._store.get_time_entries(day.work_day_id), key=lambda e: e.timestamp)
        pauses = list(self._store.get_pause_entries(day.work_day_id))
        last_out = next((e.timestamp for e in reversed(entries) if e.entry_type == EntryType.CHECK_OUT), None)

        running_until = (now or self._clock()) if include_running else None
        gross = self._gross_minutes(entries, running_until)
        manual, auto = self._apply_pauses(day, pauses, gross, last_out, settings)
        return self._store.save_work_day(replace(day, manual_pause_minutes=manual, auto_pause_minutes=auto))

    @staticmethod
    def _gross_minutes(entries: Sequence[TimeEntry], running_until: Optional[datetime]) -> int:
        total = 0
        open_in: Optional[datetime] = None
        for entry in entries:
            if entry.entry_type == EntryType.CHECK_IN:
                if open_in is None:
                    open_in = entry.timestamp
            elif open_in is not None:
                total += max(0, minutes_between(open_in, entry.timestamp))
                open_in = None

        if open_in is not None and running_until is not None and running_until > open_in:
            total += minutes_between(open_in, running_until)
        return total

    @staticmethod
    def _manual_pause_minutes(pauses: Sequence[PauseEntry]) -> int:
        return sum(p.duration_minutes for p in pauses if not p.is_auto_pause and not p.is_active)

    def _apply_pauses(
        self,
        day: WorkDay,
        pauses: Sequence[PauseEntry],
        gross: int,
        last_out: Optional[datetime],
        settings: WorkSettings,
    ) -> tuple[int, int]:
        manual = self._manual_pause_minutes(pauses)
        autos = [p for p in pauses if p.is_auto_pause]

        required = self._factory.for_settings(settings).required_pause_minutes(gross)
        shortfall = required - manual
        if shortfall <= 0:
            for pause in autos:
                self._store.delete_pause_entry(pause.pause_id)
            return manual, 0

        if last_out is not None:
            start = last_out - timedelta(minutes=shortfall)
            if autos:
                keep, extras = autos[0], autos[1:]
                for pause in extras:
                    self._store.delete_pause_entry(pause.pause_id)
                if keep.start != start or keep.end != last_out:
                    self._store.save_pause_entry(replace(keep, start=start, end=last_out))
            else:
                self._store.save_pause_entry(
                    PauseEntry(
                        pause_id=0,
                        work_day_id=day.work_day_id,
                        start=start,
                        end=last_out,
                        pause_type=PauseType.AUTO,
                        is_auto_pause=True,
                        note=AUTO_PAUSE_NOTE,
                    )
                )
        return manual, shortfall

    @staticmethod
    def _target_for(day: WorkDay, settings: WorkSettings) -> int:
        if day.status in TARGET_FREE_STATUSES:
            return day.target_minutes
        return settings.daily_minutes_for(day.work_date)

    # -- periods -----------------------------------------------------------

    def calculate_week(self, date_in_week: date) -> WorkWeek:
        monday, sunday = week_bounds(date_in_week)
        iso_year, iso_week, _ = monday.isocalendar()
        week = WorkWeek(start_date=monday, end_date=sunday, year=iso_year, week_number=iso_week)
        self._fill_period(week, self._settings.get_settings())
        return week

    def calculate_iso_week(self, year: int, week_number: int) -> WorkWeek:
        return self.calculate_week(first_day_of_iso_week(year, week_number))

    def calculate_month(self, year: int, month: int) -> WorkMonth:
        first, last = month_bounds(year, month)
        settings = self._settings.get_settings()
        work_month = WorkMonth(start_date=first, end_date=last, year=year, month=month)
        work_month.target_work_days = sum(1 for d in iter_days(first, last) if settings.is_work_day(d))
        self._fill_period(work_month, settings)

        work_month.home_office_days = sum(1 for d in work_month.days if d.status == DayStatus.HOME_OFFICE)
        work_month.is_locked = any(d.is_locked for d in work_month.days)
        work_month.cumulative_balance_minutes = self.get_cumulative_balance(last)
        return work_month

    def _fill_period(self, period: PeriodTotals, settings: WorkSettings) -> None:
        stored = {d.work_date: d for d in self._store.get_work_days(period.start_date, period.end_date)}

        for current in iter_days(period.start_date, period.end_date):
            day_target = settings.daily_minutes_for(current)
            period.target_minutes += day_target

            day = stored.get(current)
            if day is None:
                status = DayStatus.WORK_DAY if settings.is_work_day(current) else DayStatus.WEEKEND
                day = WorkDay.placeholder(current, status=status, target_minutes=day_target)
            elif day.actual_minutes == 0 and day.balance_minutes == 0 and day.target_minutes > 0:
                # Never recalculated since creation.
                day = replace(day, balance_minutes=-day.target_minutes)

            period.days.append(day)
            period.actual_minutes += day.actual_minutes
            period.pause_minutes += day.total_pause_minutes
            if day.actual_minutes > 0:
                period.worked_days += 1
            if day.status == DayStatus.VACATION:
                period.vacation_days += 1
            elif day.status == DayStatus.SICK:
                period.sick_days += 1
            elif day.status == DayStatus.HOLIDAY:
                period.holiday_days += 1

    def get_cumulative_balance(self, up_to: date) -> int:
        first = self._store.get_first_work_day_date()
        if first is None or first > up_to:
            first = up_to - timedelta(days=CUMULATIVE_FALLBACK_DAYS)
        return self._store.get_total_overtime_minutes(first, up_to)

    def get_week_progress(self, today: date | None = None) -> float:
        return self.calculate_week(today or self._clock().date()).progress_percent

    # -- compliance --------------------------------------------------------

    def check_legal_compliance(self, day: WorkDay) -> list[ComplianceFinding]:
        settings = self._settings.get_settings()
        if not settings.legal_compliance_enabled:
            return []

        findings: list[ComplianceFinding] = []
        actual = day.actual_minutes
        pause = day.total_pause_minutes

        if actual > settings.max_daily_hours * 60:
            findings.append(
                ComplianceFinding(
                    kind=ComplianceKind.DAILY_HOURS_EXCEEDED,
                    limit=settings.max_daily_hours,
                    message=f"Maximum daily working time of {settings.max_daily_hours:g} hours exceeded",
                    work_date=day.work_date,
                )
            )

        if actual > LEGAL_PAUSE_30_AFTER_MINUTES and pause < LEGAL_PAUSE_30_MINUTES:
            findings.append(
                ComplianceFinding(
                    kind=ComplianceKind.MIN_PAUSE_30,
                    limit=LEGAL_PAUSE_30_MINUTES,
                    message="At least 30 minutes of pause are required after 6 hours of work",
                    work_date=day.work_date,
                )
            )

        if actual > LEGAL_PAUSE_45_AFTER_MINUTES and pause < LEGAL_PAUSE_45_MINUTES:
            findings.append(
                ComplianceFinding(
                    kind=ComplianceKind.MIN_PAUSE_45,
                    limit=LEGAL_PAUSE_45_MINUTES,
                    message="At least 45 minutes of pause are required after 9 hours of work",
                    work_date=day.work_date,
                )
            )

        if day.first_check_in is not None:
            yesterday = self._store.get_work_day(day.work_date - timedelta(days=1))
            if yesterday is not None and yesterday.last_check_out is not None:
                rest_hours = (day.first_check_in - yesterday.last_check_out).total_seconds() / 3600
                if rest_hours < settings.min_rest_hours:
                    findings.append(
                        ComplianceFinding(
                            kind=ComplianceKind.REST_TIME_VIOLATION,
                            limit=settings.min_rest_hours,
                            message=(
                                f"Rest period of {rest_hours:.1f} hours is below the minimum of "
                                f"{settings.min_rest_hours:g} hours"
                            ),
                            work_date=day.work_date,
                        )
                    )

        return findings

