from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..achievements.model import Achievement
from ..core.enums import AchievementCategory, DayStatus, EntryType, PauseType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, as_date, as_int, db_cursor, fetchall, fetchone
from .model import PauseEntry, TimeEntry, WorkDay
from .repository import RecordStore

_WORK_DAY_COLUMNS = """
    work_day_id, work_date, status, target_minutes, actual_minutes,
    manual_pause_minutes, auto_pause_minutes, balance_minutes,
    first_check_in, last_check_out, is_locked, note
"""

_TIME_ENTRY_COLUMNS = """
    entry_id, work_day_id, entry_time, entry_type, note, is_manually_edited,
    original_time, employer_id, project_id
"""

_PAUSE_COLUMNS = "pause_id, work_day_id, start_time, end_time, pause_type, is_auto_pause, note"


def _to_work_day(r: Dict[str, Any]) -> WorkDay:
    return WorkDay(
        work_day_id=int(r["work_day_id"]),
        work_date=as_date(r["work_date"]),
        status=DayStatus(r["status"]),
        target_minutes=as_int(r["target_minutes"]),
        actual_minutes=as_int(r["actual_minutes"]),
        manual_pause_minutes=as_int(r["manual_pause_minutes"]),
        auto_pause_minutes=as_int(r["auto_pause_minutes"]),
        balance_minutes=as_int(r["balance_minutes"]),
        first_check_in=r.get("first_check_in"),
        last_check_out=r.get("last_check_out"),
        is_locked=as_bool(r["is_locked"]),
        note=r.get("note"),
    )


def _to_time_entry(r: Dict[str, Any]) -> TimeEntry:
    return TimeEntry(
        entry_id=int(r["entry_id"]),
        work_day_id=int(r["work_day_id"]),
        timestamp=r["entry_time"],
        entry_type=EntryType(r["entry_type"]),
        note=r.get("note"),
        is_manually_edited=as_bool(r["is_manually_edited"]),
        original_timestamp=r.get("original_time"),
        employer_id=r.get("employer_id"),
        project_id=r.get("project_id"),
    )


def _to_pause(r: Dict[str, Any]) -> PauseEntry:
    return PauseEntry(
        pause_id=int(r["pause_id"]),
        work_day_id=int(r["work_day_id"]),
        start=r["start_time"],
        end=r.get("end_time"),
        pause_type=PauseType(r["pause_type"]),
        is_auto_pause=as_bool(r["is_auto_pause"]),
        note=r.get("note"),
    )


def _to_achievement(r: Dict[str, Any]) -> Achievement:
    return Achievement(
        key=str(r["achievement_key"]),
        category=AchievementCategory(r["category"]),
        target=as_int(r["target"]),
        progress=as_int(r["progress"]),
        is_unlocked=as_bool(r["is_unlocked"]),
        unlocked_at=r.get("unlocked_at"),
    )


class MySQLRecordStore(RecordStore):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -- work days ---------------------------------------------------------

    def get_or_create_work_day(
        self,
        work_date: date,
        *,
        target_minutes: int = 0,
        status: DayStatus = DayStatus.WORK_DAY,
    ) -> WorkDay:
        with db_cursor(self._conn_factory) as (_, cur):
            # INSERT IGNORE keeps concurrent creators on the unique work_date.
            cur.execute(
                """
                INSERT IGNORE INTO work_days (work_date, status, target_minutes, balance_minutes)
                VALUES (%s, %s, %s, %s)
                """,
                (work_date, status.value, int(target_minutes), -int(target_minutes)),
            )
            cur.execute(f"SELECT {_WORK_DAY_COLUMNS} FROM work_days WHERE work_date=%s", (work_date,))
            return _to_work_day(fetchone(cur))

    def get_work_day(self, work_date: date) -> Optional[WorkDay]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_WORK_DAY_COLUMNS} FROM work_days WHERE work_date=%s", (work_date,))
            r = fetchone(cur)
            return _to_work_day(r) if r else None

    def get_work_day_by_id(self, work_day_id: int) -> Optional[WorkDay]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_WORK_DAY_COLUMNS} FROM work_days WHERE work_day_id=%s", (work_day_id,))
            r = fetchone(cur)
            return _to_work_day(r) if r else None

    def save_work_day(self, day: WorkDay) -> WorkDay:
        params = (
            day.work_date,
            day.status.value,
            day.target_minutes,
            day.actual_minutes,
            day.manual_pause_minutes,
            day.auto_pause_minutes,
            day.balance_minutes,
            day.first_check_in,
            day.last_check_out,
            int(day.is_locked),
            day.note,
        )
        with db_cursor(self._conn_factory) as (_, cur):
            if day.is_persisted:
                cur.execute(
                    """
                    UPDATE work_days
                    SET work_date=%s, status=%s, target_minutes=%s, actual_minutes=%s,
                        manual_pause_minutes=%s, auto_pause_minutes=%s, balance_minutes=%s,
                        first_check_in=%s, last_check_out=%s, is_locked=%s, note=%s
                    WHERE work_day_id=%s
                    """,
                    params + (day.work_day_id,),
                )
                return day
            cur.execute(
                """
                INSERT INTO work_days (
                    work_date, status, target_minutes, actual_minutes, manual_pause_minutes,
                    auto_pause_minutes, balance_minutes, first_check_in, last_check_out, is_locked, note
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                """,
                params,
            )
            return replace(day, work_day_id=int(cur.lastrowid))

    def get_work_days(self, start: date, end: date) -> Sequence[WorkDay]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_WORK_DAY_COLUMNS}
                FROM work_days
                WHERE work_date BETWEEN %s AND %s
                ORDER BY work_date
                """,
                (start, end),
            )
            return [_to_work_day(r) for r in fetchall(cur)]

    # -- time entries ------------------------------------------------------

    def get_time_entries(self, work_day_id: int) -> Sequence[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_TIME_ENTRY_COLUMNS} FROM time_entries WHERE work_day_id=%s ORDER BY entry_time, entry_id",
                (work_day_id,),
            )
            return [_to_time_entry(r) for r in fetchall(cur)]

    def get_time_entry(self, entry_id: int) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_TIME_ENTRY_COLUMNS} FROM time_entries WHERE entry_id=%s", (entry_id,))
            r = fetchone(cur)
            return _to_time_entry(r) if r else None

    def get_last_time_entry(self, work_day_id: int) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_TIME_ENTRY_COLUMNS}
                FROM time_entries
                WHERE work_day_id=%s
                ORDER BY entry_time DESC, entry_id DESC
                LIMIT 1
                """,
                (work_day_id,),
            )
            r = fetchone(cur)
            return _to_time_entry(r) if r else None

    def save_time_entry(self, entry: TimeEntry) -> TimeEntry:
        params = (
            entry.work_day_id,
            entry.timestamp,
            entry.entry_type.value,
            entry.note,
            int(entry.is_manually_edited),
            entry.original_timestamp,
            entry.employer_id,
            entry.project_id,
        )
        with db_cursor(self._conn_factory) as (_, cur):
            if entry.entry_id:
                cur.execute(
                    """
                    UPDATE time_entries
                    SET work_day_id=%s, entry_time=%s, entry_type=%s, note=%s, is_manually_edited=%s,
                        original_time=%s, employer_id=%s, project_id=%s
                    WHERE entry_id=%s
                    """,
                    params + (entry.entry_id,),
                )
                return entry
            cur.execute(
                """
                INSERT INTO time_entries (
                    work_day_id, entry_time, entry_type, note, is_manually_edited,
                    original_time, employer_id, project_id
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                """,
                params,
            )
            return replace(entry, entry_id=int(cur.lastrowid))

    # -- pauses ------------------------------------------------------------

    def get_pause_entries(self, work_day_id: int) -> Sequence[PauseEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_PAUSE_COLUMNS} FROM pause_entries WHERE work_day_id=%s ORDER BY start_time, pause_id",
                (work_day_id,),
            )
            return [_to_pause(r) for r in fetchall(cur)]

    def get_pause_entry(self, pause_id: int) -> Optional[PauseEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_PAUSE_COLUMNS} FROM pause_entries WHERE pause_id=%s", (pause_id,))
            r = fetchone(cur)
            return _to_pause(r) if r else None

    def get_active_pause(self, work_day_id: int) -> Optional[PauseEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_PAUSE_COLUMNS}
                FROM pause_entries
                WHERE work_day_id=%s AND end_time IS NULL
                ORDER BY start_time DESC
                LIMIT 1
                """,
                (work_day_id,),
            )
            r = fetchone(cur)
            return _to_pause(r) if r else None

    def save_pause_entry(self, pause: PauseEntry) -> PauseEntry:
        params = (
            pause.work_day_id,
            pause.start,
            pause.end,
            pause.pause_type.value,
            int(pause.is_auto_pause),
            pause.note,
        )
        with db_cursor(self._conn_factory) as (_, cur):
            if pause.pause_id:
                cur.execute(
                    """
                    UPDATE pause_entries
                    SET work_day_id=%s, start_time=%s, end_time=%s, pause_type=%s, is_auto_pause=%s, note=%s
                    WHERE pause_id=%s
                    """,
                    params + (pause.pause_id,),
                )
                return pause
            cur.execute(
                """
                INSERT INTO pause_entries (work_day_id, start_time, end_time, pause_type, is_auto_pause, note)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                params,
            )
            return replace(pause, pause_id=int(cur.lastrowid))

    def delete_pause_entry(self, pause_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM pause_entries WHERE pause_id=%s", (pause_id,))

    # -- aggregates --------------------------------------------------------

    def get_total_work_minutes(self, start: date, end: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COALESCE(SUM(actual_minutes), 0) AS total FROM work_days WHERE work_date BETWEEN %s AND %s",
                (start, end),
            )
            return as_int(fetchone(cur)["total"])

    def get_total_overtime_minutes(self, start: date, end: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COALESCE(SUM(balance_minutes), 0) AS total FROM work_days WHERE work_date BETWEEN %s AND %s",
                (start, end),
            )
            return as_int(fetchone(cur)["total"])

    def get_first_work_day_date(self) -> Optional[date]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT MIN(work_date) AS first_date FROM work_days")
            r = fetchone(cur)
            return as_date(r["first_date"]) if r else None

    # -- achievements ------------------------------------------------------

    def get_all_achievements(self) -> Sequence[Achievement]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT achievement_key, category, target, progress, is_unlocked, unlocked_at
                FROM achievements
                ORDER BY achievement_key
                """
            )
            return [_to_achievement(r) for r in fetchall(cur)]

    def save_achievement(self, achievement: Achievement) -> Achievement:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO achievements (achievement_key, category, target, progress, is_unlocked, unlocked_at)
                VALUES (%s, %s, %s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE
                    category=VALUES(category), target=VALUES(target), progress=VALUES(progress),
                    is_unlocked=VALUES(is_unlocked), unlocked_at=VALUES(unlocked_at)
                """,
                (
                    achievement.key,
                    achievement.category.value,
                    achievement.target,
                    achievement.progress,
                    int(achievement.is_unlocked),
                    achievement.unlocked_at,
                ),
            )
            return achievement
