from __future__ import annotations

from collections import Counter
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional

import pytest

from worktime_engine.achievements.model import Achievement
from worktime_engine.calculation.service import CalculationService
from worktime_engine.core.enums import DayStatus, EntryType
from worktime_engine.settings.model import WorkSettings
from worktime_engine.settings.provider import StaticSettingsProvider
from worktime_engine.tracking.service import TimeTrackingService
from worktime_engine.workdays.model import PauseEntry, TimeEntry, WorkDay


class InMemoryRecordStore:
    """Record store fake; `calls` counts every method invocation by name."""

    def __init__(self):
        self.days: dict[int, WorkDay] = {}
        self.entries: dict[int, TimeEntry] = {}
        self.pauses: dict[int, PauseEntry] = {}
        self.achievements: dict[str, Achievement] = {}
        self.calls: Counter[str] = Counter()
        self._ids = Counter()

    def _next_id(self, kind: str) -> int:
        self._ids[kind] += 1
        return self._ids[kind]

    # -- work days

    def get_or_create_work_day(self, work_date: date, *, target_minutes: int = 0, status=DayStatus.WORK_DAY) -> WorkDay:
        self.calls["get_or_create_work_day"] += 1
        existing = self._find_day(work_date)
        if existing is not None:
            return existing
        day = WorkDay(
            work_day_id=self._next_id("day"),
            work_date=work_date,
            status=status,
            target_minutes=target_minutes,
            balance_minutes=-target_minutes,
        )
        self.days[day.work_day_id] = day
        return day

    def get_work_day(self, work_date: date) -> Optional[WorkDay]:
        self.calls["get_work_day"] += 1
        return self._find_day(work_date)

    def get_work_day_by_id(self, work_day_id: int) -> Optional[WorkDay]:
        self.calls["get_work_day_by_id"] += 1
        return self.days.get(work_day_id)

    def save_work_day(self, day: WorkDay) -> WorkDay:
        self.calls["save_work_day"] += 1
        if not day.work_day_id:
            day = replace(day, work_day_id=self._next_id("day"))
        self.days[day.work_day_id] = day
        return day

    def get_work_days(self, start: date, end: date):
        self.calls["get_work_days"] += 1
        return sorted((d for d in self.days.values() if start <= d.work_date <= end), key=lambda d: d.work_date)

    def _find_day(self, work_date: date) -> Optional[WorkDay]:
        return next((d for d in self.days.values() if d.work_date == work_date), None)

    # -- entries

    def get_time_entries(self, work_day_id: int):
        self.calls["get_time_entries"] += 1
        return sorted(
            (e for e in self.entries.values() if e.work_day_id == work_day_id),
            key=lambda e: (e.timestamp, e.entry_id),
        )

    def get_time_entry(self, entry_id: int) -> Optional[TimeEntry]:
        self.calls["get_time_entry"] += 1
        return self.entries.get(entry_id)

    def get_last_time_entry(self, work_day_id: int) -> Optional[TimeEntry]:
        self.calls["get_last_time_entry"] += 1
        entries = [e for e in self.entries.values() if e.work_day_id == work_day_id]
        return max(entries, key=lambda e: (e.timestamp, e.entry_id), default=None)

    def save_time_entry(self, entry: TimeEntry) -> TimeEntry:
        self.calls["save_time_entry"] += 1
        if not entry.entry_id:
            entry = replace(entry, entry_id=self._next_id("entry"))
        self.entries[entry.entry_id] = entry
        return entry

    # -- pauses

    def get_pause_entries(self, work_day_id: int):
        self.calls["get_pause_entries"] += 1
        return sorted((p for p in self.pauses.values() if p.work_day_id == work_day_id), key=lambda p: p.start)

    def get_pause_entry(self, pause_id: int) -> Optional[PauseEntry]:
        self.calls["get_pause_entry"] += 1
        return self.pauses.get(pause_id)

    def get_active_pause(self, work_day_id: int) -> Optional[PauseEntry]:
        self.calls["get_active_pause"] += 1
        return next((p for p in self.pauses.values() if p.work_day_id == work_day_id and p.end is None), None)

    def save_pause_entry(self, pause: PauseEntry) -> PauseEntry:
        self.calls["save_pause_entry"] += 1
        if not pause.pause_id:
            pause = replace(pause, pause_id=self._next_id("pause"))
        self.pauses[pause.pause_id] = pause
        return pause

    def delete_pause_entry(self, pause_id: int) -> None:
        self.calls["delete_pause_entry"] += 1
        self.pauses.pop(pause_id, None)

    # -- aggregates

    def get_total_work_minutes(self, start: date, end: date) -> int:
        self.calls["get_total_work_minutes"] += 1
        return sum(d.actual_minutes for d in self.days.values() if start <= d.work_date <= end)

    def get_total_overtime_minutes(self, start: date, end: date) -> int:
        self.calls["get_total_overtime_minutes"] += 1
        return sum(d.balance_minutes for d in self.days.values() if start <= d.work_date <= end)

    def get_first_work_day_date(self) -> Optional[date]:
        self.calls["get_first_work_day_date"] += 1
        return min((d.work_date for d in self.days.values()), default=None)

    # -- achievements

    def get_all_achievements(self):
        self.calls["get_all_achievements"] += 1
        return sorted(self.achievements.values(), key=lambda a: a.key)

    def save_achievement(self, achievement: Achievement) -> Achievement:
        self.calls["save_achievement"] += 1
        self.achievements[achievement.key] = achievement
        return achievement

    # -- test helpers

    def add_day(self, work_date: date, **fields) -> WorkDay:
        actual = fields.pop("actual_minutes", 0)
        target = fields.pop("target_minutes", 480 if work_date.weekday() < 5 else 0)
        day = WorkDay(
            work_day_id=self._next_id("day"),
            work_date=work_date,
            target_minutes=target,
            actual_minutes=actual,
            balance_minutes=fields.pop("balance_minutes", actual - target),
            **fields,
        )
        self.days[day.work_day_id] = day
        return day

    def add_entry(self, day: WorkDay, timestamp: datetime, entry_type: EntryType) -> TimeEntry:
        entry = TimeEntry(self._next_id("entry"), day.work_day_id, timestamp, entry_type)
        self.entries[entry.entry_id] = entry
        return entry

    def add_pause(self, day: WorkDay, start: datetime, end: Optional[datetime], **fields) -> PauseEntry:
        pause = PauseEntry(self._next_id("pause"), day.work_day_id, start, end, **fields)
        self.pauses[pause.pause_id] = pause
        return pause


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class RecordingNotificationSink:
    def __init__(self):
        self.shown: list[tuple[Optional[str], str, str]] = []
        self.scheduled: dict[str, tuple[str, str, datetime]] = {}
        self.cancelled: list[str] = []

    def show_notification(self, title: str, body: str, notification_id: Optional[str] = None) -> None:
        self.shown.append((notification_id, title, body))

    def schedule_notification(self, notification_id: str, title: str, body: str, trigger_at: datetime) -> None:
        self.scheduled[notification_id] = (title, body, trigger_at)

    def cancel_notification(self, notification_id: str) -> None:
        self.cancelled.append(notification_id)
        self.scheduled.pop(notification_id, None)

    def shown_ids(self) -> list[Optional[str]]:
        return [n[0] for n in self.shown]


@pytest.fixture
def fixed_now() -> datetime:
    # Wednesday
    return datetime(2024, 3, 13, 8, 0)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def settings() -> WorkSettings:
    return WorkSettings()


@pytest.fixture
def settings_provider(settings) -> StaticSettingsProvider:
    return StaticSettingsProvider(settings)


@pytest.fixture
def calculation(store, settings_provider, clock) -> CalculationService:
    return CalculationService(store, settings_provider, clock=clock)


@pytest.fixture
def tracking(store, calculation, settings_provider, clock) -> TimeTrackingService:
    return TimeTrackingService(store, calculation, settings_provider, clock=clock)


@pytest.fixture
def sink() -> RecordingNotificationSink:
    return RecordingNotificationSink()
