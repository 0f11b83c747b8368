from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.enums import ComplianceKind
from ..workdays.model import WorkDay


@dataclass
class PeriodTotals:
    start_date: date
    end_date: date
    target_minutes: int = 0
    actual_minutes: int = 0
    pause_minutes: int = 0
    worked_days: int = 0
    vacation_days: int = 0
    sick_days: int = 0
    holiday_days: int = 0
    days: list[WorkDay] = field(default_factory=list)

    @property
    def balance_minutes(self) -> int:
        return self.actual_minutes - self.target_minutes

    @property
    def progress_percent(self) -> float:
        if self.target_minutes <= 0:
            return 0.0
        return min(100.0, self.actual_minutes * 100.0 / self.target_minutes)


@dataclass
class WorkWeek(PeriodTotals):
    """One ISO week, Monday to Sunday."""

    year: int = 0
    week_number: int = 0


@dataclass
class WorkMonth(PeriodTotals):
    year: int = 0
    month: int = 0
    target_work_days: int = 0
    home_office_days: int = 0
    is_locked: bool = False
    cumulative_balance_minutes: int = 0


@dataclass(frozen=True)
class ComplianceFinding:
    kind: ComplianceKind
    limit: float
    message: str
    work_date: Optional[date] = None
