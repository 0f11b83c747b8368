from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from ..core.enums import TrackingStatus
from ..workdays.model import WorkDay


@dataclass(frozen=True)
class LiveSnapshot:
    """Live figures of the active day, computed from one entries + pauses load."""

    status: TrackingStatus
    work_day: WorkDay
    work_time: timedelta
    pause_time: timedelta
    time_until_end: Optional[timedelta]
