from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Sequence

from ..calculation.service import CalculationService
from ..common.datetime_utils import now_local
from ..common.events import Event
from ..core.constants import DUPLICATE_PRESS_SECONDS, TARGET_FREE_STATUSES
from ..core.enums import DayStatus, EntryType, TrackingStatus
from ..core.exceptions import InvalidStateTransition, LockedDayError, NotFoundError, ValidationError
from ..settings.provider import SettingsProvider
from ..workdays.model import PauseEntry, TimeEntry, WorkDay
from ..workdays.repository import RecordStore
from .model import LiveSnapshot

logger = logging.getLogger(__name__)


class TimeTrackingService:
    """Check-in / check-out / pause state machine.

    The status is private; read it through `current_status` and subscribe to
    `status_changed`, which is emitted synchronously (under the service lock)
    with the new TrackingStatus. Listeners must not call mutating methods of
    this service.
    """

    def __init__(
        self,
        store: RecordStore,
        calculation: CalculationService,
        settings: SettingsProvider,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._store = store
        self._calculation = calculation
        self._settings = settings
        self._clock = clock
        self._lock = threading.Lock()
        self._status = TrackingStatus.IDLE
        self._session_duration = timedelta(0)
        self.status_changed = Event("status_changed")

    @property
    def current_status(self) -> TrackingStatus:
        return self._status

    # -- state machine -----------------------------------------------------

    def check_in(
        self,
        *,
        employer_id: Optional[int] = None,
        project_id: Optional[int] = None,
        note: Optional[str] = None,
        now: datetime | None = None,
    ) -> TimeEntry:
        with self._lock:
            now = now or self._clock()

            if self._status != TrackingStatus.IDLE:
                if self._status == TrackingStatus.WORKING:
                    repeated = self._recent_check_in(self.get_active_work_day(now), now)
                    if repeated is not None:
                        return repeated
                raise InvalidStateTransition(f"Cannot check in while {self._status.value}")

            day = self._get_or_create_day(now.date())
            repeated = self._recent_check_in(day, now)
            if repeated is not None:
                logger.info("Repeated check-in within %ds ignored", DUPLICATE_PRESS_SECONDS)
                self._set_status(TrackingStatus.WORKING)
                return repeated

            entry = self._store.save_time_entry(
                TimeEntry(
                    entry_id=0,
                    work_day_id=day.work_day_id,
                    timestamp=now,
                    entry_type=EntryType.CHECK_IN,
                    note=note,
                    employer_id=employer_id,
                    project_id=project_id,
                )
            )
            if day.first_check_in is None:
                day = self._store.save_work_day(replace(day, first_check_in=now))

            self._refresh_session_duration(day, now)
            logger.info("Checked in at %s", now.isoformat(timespec="seconds"))
            self._set_status(TrackingStatus.WORKING)
            return entry

    def check_out(self, *, note: Optional[str] = None, now: datetime | None = None) -> TimeEntry:
        with self._lock:
            if self._status == TrackingStatus.IDLE:
                raise InvalidStateTransition("Cannot check out while IDLE")
            now = now or self._clock()
            day = self.get_active_work_day(now)

            active_pause = self._store.get_active_pause(day.work_day_id)
            if active_pause is not None:
                self._store.save_pause_entry(replace(active_pause, end=now))

            entry = self._store.save_time_entry(
                TimeEntry(
                    entry_id=0,
                    work_day_id=day.work_day_id,
                    timestamp=now,
                    entry_type=EntryType.CHECK_OUT,
                    note=note,
                )
            )
            day = self._calculation.recalculate_work_day(replace(day, last_check_out=now), now=now)

            self._session_duration = timedelta(0)
            logger.info(
                "Checked out at %s (actual=%d balance=%d)",
                now.isoformat(timespec="seconds"),
                day.actual_minutes,
                day.balance_minutes,
            )
            self._set_status(TrackingStatus.IDLE)
            return entry

    def start_pause(self, *, note: Optional[str] = None, now: datetime | None = None) -> PauseEntry:
        with self._lock:
            if self._status == TrackingStatus.IDLE:
                raise InvalidStateTransition("Cannot start a pause while IDLE")
            now = now or self._clock()
            day = self.get_active_work_day(now)

            existing = self._store.get_active_pause(day.work_day_id)
            if existing is not None:
                self._set_status(TrackingStatus.ON_BREAK)
                return existing

            pause = self._store.save_pause_entry(
                PauseEntry(pause_id=0, work_day_id=day.work_day_id, start=now, note=note)
            )
            self._set_status(TrackingStatus.ON_BREAK)
            return pause

    def end_pause(self, *, now: datetime | None = None) -> PauseEntry:
        with self._lock:
            if self._status != TrackingStatus.ON_BREAK:
                raise InvalidStateTransition(f"Cannot end a pause while {self._status.value}")
            now = now or self._clock()
            day = self.get_active_work_day(now)

            active_pause = self._store.get_active_pause(day.work_day_id)
            if active_pause is None:
                raise InvalidStateTransition("No active pause to end")

            closed = self._store.save_pause_entry(replace(active_pause, end=now))
            day = self._calculation.recalculate_pause_time(day, include_running=True, now=now)

            self._refresh_session_duration(day, now)
            self._set_status(TrackingStatus.WORKING)
            return closed

    def load_status(self, *, now: datetime | None = None) -> TrackingStatus:
        """Rehydrate the status from stored entries (open pause wins over open check-in)."""
        with self._lock:
            now = now or self._clock()
            day = self.get_active_work_day(now)
            last = self._store.get_last_time_entry(day.work_day_id)

            status = TrackingStatus.IDLE
            if last is not None and last.entry_type == EntryType.CHECK_IN:
                has_pause = self._store.get_active_pause(day.work_day_id) is not None
                status = TrackingStatus.ON_BREAK if has_pause else TrackingStatus.WORKING
                self._refresh_session_duration(day, now)
            else:
                self._session_duration = timedelta(0)

            self._status = status
            logger.info("Loaded tracking status %s for %s", status.value, day.work_date)
            self.status_changed.emit(status)
            return status

    def get_active_work_day(self, now: datetime | None = None) -> WorkDay:
        """Today if it has an open check-in, else yesterday if that has one, else today."""
        now = now or self._clock()
        today = self._get_or_create_day(now.date())
        last = self._store.get_last_time_entry(today.work_day_id)
        if last is not None and last.entry_type == EntryType.CHECK_IN:
            return today

        yesterday = self._store.get_work_day(now.date() - timedelta(days=1))
        if yesterday is not None:
            last = self._store.get_last_time_entry(yesterday.work_day_id)
            if last is not None and last.entry_type == EntryType.CHECK_IN:
                return yesterday
        return today

    def get_today(self) -> WorkDay:
        return self._get_or_create_day(self._clock().date())

    # -- live figures ------------------------------------------------------

    def get_live_snapshot(self, *, now: datetime | None = None) -> LiveSnapshot:
        now = now or self._clock()
        day = self.get_active_work_day(now)
        entries = self._store.get_time_entries(day.work_day_id)
        pauses = self._store.get_pause_entries(day.work_day_id)
        work_time, pause_time = self._live_figures(entries, pauses, now)
        if self._status != TrackingStatus.IDLE:
            self._session_duration = work_time
        return LiveSnapshot(
            status=self._status,
            work_day=day,
            work_time=work_time,
            pause_time=pause_time,
            time_until_end=self._time_until_end(day, work_time),
        )

    def get_current_work_time(self, *, now: datetime | None = None) -> timedelta:
        return self.get_live_snapshot(now=now).work_time

    def get_current_pause_time(self, *, now: datetime | None = None) -> timedelta:
        return self.get_live_snapshot(now=now).pause_time

    def get_time_until_end(self, *, now: datetime | None = None) -> Optional[timedelta]:
        """Remaining time to today's target; None while idle."""
        return self.get_live_snapshot(now=now).time_until_end

    def get_current_session_duration(self) -> timedelta:
        """Last computed work time of the running session; never touches the store."""
        return self._session_duration

    def _refresh_session_duration(self, day: WorkDay, now: datetime) -> None:
        entries = self._store.get_time_entries(day.work_day_id)
        pauses = self._store.get_pause_entries(day.work_day_id)
        self._session_duration, _ = self._live_figures(entries, pauses, now)

    @staticmethod
    def _live_figures(
        entries: Sequence[TimeEntry],
        pauses: Sequence[PauseEntry],
        now: datetime,
    ) -> tuple[timedelta, timedelta]:
        worked = timedelta(0)
        open_in: Optional[datetime] = None
        for entry in sorted(entries, key=lambda e: e.timestamp):
            if entry.entry_type == EntryType.CHECK_IN:
                if open_in is None:
                    open_in = entry.timestamp
            elif open_in is not None:
                worked += entry.timestamp - open_in
                open_in = None
        if open_in is not None and now > open_in:
            worked += now - open_in

        active = next((p for p in pauses if p.is_active), None)
        active_elapsed = now - active.start if active is not None and now > active.start else timedelta(0)
        closed_all = sum((p.duration for p in pauses if not p.is_active), timedelta(0))
        closed_manual = sum((p.duration for p in pauses if not p.is_active and not p.is_auto_pause), timedelta(0))

        work_time = max(timedelta(0), worked - closed_all - active_elapsed)
        return work_time, closed_manual + active_elapsed

    def _time_until_end(self, day: WorkDay, work_time: timedelta) -> Optional[timedelta]:
        if self._status == TrackingStatus.IDLE:
            return None
        remaining = timedelta(minutes=day.target_minutes) - work_time
        return max(timedelta(0), remaining)

    # -- manual edits ------------------------------------------------------

    def add_manual_entry(
        self,
        timestamp: datetime,
        entry_type: EntryType,
        note: Optional[str] = None,
    ) -> TimeEntry:
        with self._lock:
            day = self._get_or_create_day(timestamp.date())
            self._ensure_unlocked(day)
            entry = self._store.save_time_entry(
                TimeEntry(
                    entry_id=0,
                    work_day_id=day.work_day_id,
                    timestamp=timestamp,
                    entry_type=entry_type,
                    note=note,
                    is_manually_edited=True,
                )
            )
            self._recalculate_after_edit(day)
            return entry

    def update_time_entry(
        self,
        entry_id: int,
        new_timestamp: datetime,
        note: Optional[str] = None,
    ) -> Optional[TimeEntry]:
        with self._lock:
            try:
                entry = self._store.get_time_entry(entry_id)
                if entry is None:
                    raise NotFoundError(f"Time entry {entry_id} not found")
                day = self._require_work_day(entry.work_day_id)
            except NotFoundError as exc:
                logger.warning("%s; nothing updated", exc)
                return None
            self._ensure_unlocked(day)

            updated = self._store.save_time_entry(
                replace(
                    entry,
                    timestamp=new_timestamp,
                    note=entry.note if note is None else note,
                    is_manually_edited=True,
                    # Only the first edit records the machine-captured time.
                    original_timestamp=entry.original_timestamp or entry.timestamp,
                )
            )
            self._recalculate_after_edit(day)
            return updated

    def update_pause_entry(
        self,
        pause_id: int,
        new_start: datetime,
        new_end: Optional[datetime],
    ) -> Optional[PauseEntry]:
        with self._lock:
            try:
                pause = self._store.get_pause_entry(pause_id)
                if pause is None:
                    raise NotFoundError(f"Pause {pause_id} not found")
                day = self._require_work_day(pause.work_day_id)
            except NotFoundError as exc:
                logger.warning("%s; nothing updated", exc)
                return None
            self._ensure_unlocked(day)
            if new_end is None:
                open_pause = self._store.get_active_pause(day.work_day_id)
                if open_pause is not None and open_pause.pause_id != pause_id:
                    raise ValidationError(f"Work day {day.work_date.isoformat()} already has an open pause")

            updated = self._store.save_pause_entry(replace(pause, start=new_start, end=new_end))
            self._recalculate_after_edit(day)
            return updated

    def set_day_status(self, work_date: date, status: DayStatus, *, note: Optional[str] = None) -> WorkDay:
        with self._lock:
            day = self._get_or_create_day(work_date)
            self._ensure_unlocked(day)
            if status in TARGET_FREE_STATUSES:
                target = 0
            else:
                target = self._settings.get_settings().daily_minutes_for(work_date)
            day = replace(day, status=status, target_minutes=target, note=day.note if note is None else note)
            return self._recalculate_after_edit(day)

    def lock_period(self, start: date, end: date) -> int:
        """Freeze every stored day in [start, end]; returns how many were newly locked."""
        with self._lock:
            locked = 0
            for day in self._store.get_work_days(start, end):
                if not day.is_locked:
                    self._store.save_work_day(replace(day, is_locked=True))
                    locked += 1
            logger.info("Locked %d work days between %s and %s", locked, start, end)
            return locked

    def _recalculate_after_edit(self, day: WorkDay) -> WorkDay:
        now = self._clock()
        include_running = False
        if self._status == TrackingStatus.WORKING:
            include_running = self.get_active_work_day(now).work_day_id == day.work_day_id
        return self._calculation.recalculate_work_day(day, include_running=include_running, now=now)

    # -- helpers -----------------------------------------------------------

    def _get_or_create_day(self, work_date: date) -> WorkDay:
        settings = self._settings.get_settings()
        return self._store.get_or_create_work_day(
            work_date,
            target_minutes=settings.daily_minutes_for(work_date),
            status=DayStatus.WORK_DAY if settings.is_work_day(work_date) else DayStatus.WEEKEND,
        )

    def _recent_check_in(self, day: WorkDay, now: datetime) -> Optional[TimeEntry]:
        last = self._store.get_last_time_entry(day.work_day_id)
        if last is None or last.entry_type != EntryType.CHECK_IN:
            return None
        elapsed = (now - last.timestamp).total_seconds()
        if 0 <= elapsed < DUPLICATE_PRESS_SECONDS:
            return last
        return None

    def _require_work_day(self, work_day_id: int) -> WorkDay:
        day = self._store.get_work_day_by_id(work_day_id)
        if day is None:
            raise NotFoundError(f"Work day {work_day_id} not found")
        return day

    @staticmethod
    def _ensure_unlocked(day: WorkDay) -> None:
        if day.is_locked:
            raise LockedDayError(f"Work day {day.work_date.isoformat()} is locked")

    def _set_status(self, status: TrackingStatus) -> None:
        if status == self._status:
            return
        previous, self._status = self._status, status
        logger.debug("Tracking status %s -> %s", previous.value, status.value)
        self.status_changed.emit(status)
