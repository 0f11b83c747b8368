from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Optional

from ..core.constants import MAX_PLAUSIBLE_PAUSE
from ..core.enums import DayStatus, EntryType, PauseType


@dataclass(frozen=True)
class WorkDay:
    """Domain entity: one calendar date of tracked work.

    `balance_minutes` is only ever set together with actual and target through
    `with_totals`, so `balance = actual - target` holds for every saved row.
    """

    work_day_id: int
    work_date: date
    status: DayStatus = DayStatus.WORK_DAY
    target_minutes: int = 0
    actual_minutes: int = 0
    manual_pause_minutes: int = 0
    auto_pause_minutes: int = 0
    balance_minutes: int = 0
    first_check_in: Optional[datetime] = None
    last_check_out: Optional[datetime] = None
    is_locked: bool = False
    note: Optional[str] = None

    @property
    def total_pause_minutes(self) -> int:
        return self.manual_pause_minutes + self.auto_pause_minutes

    @property
    def is_persisted(self) -> bool:
        return self.work_day_id > 0

    def with_totals(
        self,
        *,
        actual_minutes: int,
        target_minutes: int,
        manual_pause_minutes: Optional[int] = None,
        auto_pause_minutes: Optional[int] = None,
        first_check_in: Optional[datetime] = None,
        last_check_out: Optional[datetime] = None,
    ) -> "WorkDay":
        return replace(
            self,
            actual_minutes=actual_minutes,
            target_minutes=target_minutes,
            balance_minutes=actual_minutes - target_minutes,
            manual_pause_minutes=self.manual_pause_minutes if manual_pause_minutes is None else manual_pause_minutes,
            auto_pause_minutes=self.auto_pause_minutes if auto_pause_minutes is None else auto_pause_minutes,
            first_check_in=first_check_in,
            last_check_out=last_check_out,
        )

    @classmethod
    def placeholder(cls, work_date: date, *, status: DayStatus, target_minutes: int) -> "WorkDay":
        """Unsaved stand-in for a date without a stored row."""
        return cls(
            work_day_id=0,
            work_date=work_date,
            status=status,
            target_minutes=target_minutes,
            balance_minutes=-target_minutes,
        )


@dataclass(frozen=True)
class TimeEntry:
    entry_id: int
    work_day_id: int
    timestamp: datetime
    entry_type: EntryType
    note: Optional[str] = None
    is_manually_edited: bool = False
    original_timestamp: Optional[datetime] = None
    employer_id: Optional[int] = None
    project_id: Optional[int] = None


@dataclass(frozen=True)
class PauseEntry:
    pause_id: int
    work_day_id: int
    start: datetime
    end: Optional[datetime] = None
    pause_type: PauseType = PauseType.MANUAL
    is_auto_pause: bool = False
    note: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.end is None

    @property
    def duration(self) -> timedelta:
        if self.end is None:
            return timedelta(0)
        span = self.end - self.start
        # Crossing midnight with a time-only edit leaves end before start.
        if span < timedelta(0):
            span += timedelta(hours=24)
        if span > MAX_PLAUSIBLE_PAUSE:
            return timedelta(0)
        return span

    @property
    def duration_minutes(self) -> int:
        return int(self.duration.total_seconds() // 60)
