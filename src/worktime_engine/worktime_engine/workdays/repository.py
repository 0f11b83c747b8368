from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..achievements.model import Achievement
from ..core.enums import DayStatus
from .model import PauseEntry, TimeEntry, WorkDay


class RecordStore(Protocol):
    """Persistence boundary of the engine.

    Save methods return the stored entity; new entities are passed with id 0
    and come back with their assigned id.
    """

    def get_or_create_work_day(
        self,
        work_date: date,
        *,
        target_minutes: int = 0,
        status: DayStatus = DayStatus.WORK_DAY,
    ) -> WorkDay:
        raise NotImplementedError

    def get_work_day(self, work_date: date) -> Optional[WorkDay]:
        raise NotImplementedError

    def get_work_day_by_id(self, work_day_id: int) -> Optional[WorkDay]:
        raise NotImplementedError

    def save_work_day(self, day: WorkDay) -> WorkDay:
        raise NotImplementedError

    def get_work_days(self, start: date, end: date) -> Sequence[WorkDay]:
        """Stored days in [start, end] ordered by date."""
        raise NotImplementedError

    def get_time_entries(self, work_day_id: int) -> Sequence[TimeEntry]:
        """Entries of one day ordered by timestamp."""
        raise NotImplementedError

    def get_time_entry(self, entry_id: int) -> Optional[TimeEntry]:
        raise NotImplementedError

    def get_last_time_entry(self, work_day_id: int) -> Optional[TimeEntry]:
        raise NotImplementedError

    def save_time_entry(self, entry: TimeEntry) -> TimeEntry:
        raise NotImplementedError

    def get_pause_entries(self, work_day_id: int) -> Sequence[PauseEntry]:
        raise NotImplementedError

    def get_pause_entry(self, pause_id: int) -> Optional[PauseEntry]:
        raise NotImplementedError

    def get_active_pause(self, work_day_id: int) -> Optional[PauseEntry]:
        raise NotImplementedError

    def save_pause_entry(self, pause: PauseEntry) -> PauseEntry:
        raise NotImplementedError

    def delete_pause_entry(self, pause_id: int) -> None:
        raise NotImplementedError

    def get_total_work_minutes(self, start: date, end: date) -> int:
        raise NotImplementedError

    def get_total_overtime_minutes(self, start: date, end: date) -> int:
        raise NotImplementedError

    def get_first_work_day_date(self) -> Optional[date]:
        raise NotImplementedError

    def get_all_achievements(self) -> Sequence[Achievement]:
        raise NotImplementedError

    def save_achievement(self, achievement: Achievement) -> Achievement:
        raise NotImplementedError
