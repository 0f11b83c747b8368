from __future__ import annotations

import logging
import threading
from datetime import datetime, time, timedelta
from typing import Callable, Optional

from ..calculation.service import CalculationService
from ..common.datetime_utils import next_monday, now_local
from ..common.timers import OneShotTimer
from ..core.constants import (
    ALL_REMINDER_IDS,
    EVENING_REMINDER_ID,
    MORNING_REMINDER_ID,
    OVERTIME_REMINDER_ID,
    PAUSE_REMINDER_ID,
    WEEKLY_SUMMARY_ID,
)
from ..core.enums import TrackingStatus
from ..settings.model import WorkSettings
from ..settings.provider import SettingsProvider
from ..tracking.service import TimeTrackingService
from . import messages
from .notifications import NotificationSink

logger = logging.getLogger(__name__)


class ReminderScheduler:
    """Keeps reminders and in-session timers in line with the tracking status.

    Subscribes to `status_changed` on construction; `close()` unsubscribes and
    stops the owned timers.
    """

    def __init__(
        self,
        notifications: NotificationSink,
        tracking: TimeTrackingService,
        calculation: CalculationService,
        settings: SettingsProvider,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._notifications = notifications
        self._tracking = tracking
        self._calculation = calculation
        self._settings = settings
        self._clock = clock
        self._lock = threading.Lock()
        self._pause_timer: Optional[OneShotTimer] = None
        self._overtime_timer: Optional[OneShotTimer] = None
        self._closed = False
        tracking.status_changed.add_listener(self.on_status_changed)

    @property
    def pause_timer(self) -> Optional[OneShotTimer]:
        return self._pause_timer

    @property
    def overtime_timer(self) -> Optional[OneShotTimer]:
        return self._overtime_timer

    # -- lifecycle ---------------------------------------------------------

    def initialize(self) -> None:
        """Schedule morning, evening and weekly notifications.

        In-session timers are armed by the `status_changed` event, so call this
        before `load_status()` on startup.
        """
        if self._closed:
            return
        try:
            settings = self._settings.get_settings()
            now = self._clock()
            self._schedule_morning(settings, now)
            self._schedule_evening(settings, now, self._tracking.current_status)
            self._schedule_weekly(settings, now)
        except Exception:
            logger.exception("Failed to initialize reminders")

    def reschedule(self) -> None:
        """Drop every pending reminder and build them again from current settings."""
        if self._closed:
            return
        for notification_id in ALL_REMINDER_IDS:
            self._cancel(notification_id)
        self._stop_timers()
        self.initialize()
        if self._tracking.current_status == TrackingStatus.WORKING:
            try:
                self._start_session_timers(self._settings.get_settings())
            except Exception:
                logger.exception("Failed to restart session timers")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._tracking.status_changed.remove_listener(self.on_status_changed)
        self._stop_timers()

    # -- status handling ---------------------------------------------------

    def on_status_changed(self, status: TrackingStatus) -> None:
        if self._closed:
            return
        try:
            settings = self._settings.get_settings()
            if status == TrackingStatus.WORKING:
                self._cancel(MORNING_REMINDER_ID)
                self._start_session_timers(settings)
                self._schedule_evening(settings, self._clock(), status)
            elif status == TrackingStatus.ON_BREAK:
                self._stop_pause_timer()
            else:
                now = self._clock()
                self._cancel(EVENING_REMINDER_ID)
                self._stop_timers()
                self._schedule_morning(settings, now)
                self._schedule_evening(settings, now, status)
                self._schedule_weekly(settings, now)
        except Exception:
            logger.exception("Failed to update reminders for status %s", status.value)

    # -- in-session timers -------------------------------------------------

    def _start_session_timers(self, settings: WorkSettings) -> None:
        elapsed = self._tracking.get_current_session_duration().total_seconds()

        self._stop_pause_timer()
        if settings.pause_reminder_enabled:
            pause_hours = settings.pause_reminder_after_hours
            pause_body = messages.PAUSE_BODY.format(hours=pause_hours)
            timer = OneShotTimer(
                pause_hours * 3600 - elapsed,
                lambda: self._show(messages.PAUSE_TITLE, pause_body, PAUSE_REMINDER_ID),
                name="pause-reminder",
            )
            with self._lock:
                self._pause_timer = timer
            timer.start()

        self._stop_overtime_timer()
        if settings.overtime_warning_enabled:
            max_hours = settings.max_daily_hours
            overtime_body = messages.OVERTIME_BODY.format(hours=max_hours)
            timer = OneShotTimer(
                max_hours * 3600 - elapsed,
                lambda: self._show(messages.OVERTIME_TITLE, overtime_body, OVERTIME_REMINDER_ID),
                name="overtime-reminder",
            )
            with self._lock:
                self._overtime_timer = timer
            timer.start()

    def _stop_pause_timer(self) -> None:
        with self._lock:
            timer, self._pause_timer = self._pause_timer, None
        if timer is not None:
            timer.cancel()

    def _stop_overtime_timer(self) -> None:
        with self._lock:
            timer, self._overtime_timer = self._overtime_timer, None
        if timer is not None:
            timer.cancel()

    def _stop_timers(self) -> None:
        self._stop_pause_timer()
        self._stop_overtime_timer()

    # -- scheduled notifications -------------------------------------------

    def _schedule_morning(self, settings: WorkSettings, now: datetime) -> None:
        if not settings.morning_reminder_enabled:
            return
        trigger = self._next_work_day_at(settings, now, settings.morning_reminder_time, first_offset=0)
        if trigger is not None:
            self._notifications.schedule_notification(
                MORNING_REMINDER_ID, messages.MORNING_TITLE, messages.MORNING_BODY, trigger
            )

    def _schedule_evening(self, settings: WorkSettings, now: datetime, status: TrackingStatus) -> None:
        if not settings.evening_reminder_enabled:
            return
        # While a day is running the reminder belongs to today, otherwise to the next work day.
        first_offset = 0 if status != TrackingStatus.IDLE else 1
        trigger = self._next_work_day_at(settings, now, settings.evening_reminder_time, first_offset=first_offset)
        if trigger is not None:
            self._notifications.schedule_notification(
                EVENING_REMINDER_ID, messages.EVENING_TITLE, messages.EVENING_BODY, trigger
            )

    def _schedule_weekly(self, settings: WorkSettings, now: datetime) -> None:
        if not settings.weekly_summary_enabled:
            return
        week = self._calculation.calculate_week(now.date())
        trigger = datetime.combine(next_monday(now.date()), settings.morning_reminder_time)
        self._notifications.schedule_notification(
            WEEKLY_SUMMARY_ID,
            messages.WEEKLY_TITLE.format(week=week.week_number),
            messages.WEEKLY_BODY.format(
                worked=week.actual_minutes / 60,
                target=week.target_minutes / 60,
                balance=messages.format_balance_hours(week.balance_minutes),
            ),
            trigger,
        )

    @staticmethod
    def _next_work_day_at(
        settings: WorkSettings,
        now: datetime,
        at: time,
        *,
        first_offset: int,
    ) -> Optional[datetime]:
        """First designated work day (searching a week ahead) whose reminder time is still ahead."""
        for offset in range(first_offset, first_offset + 8):
            day = now.date() + timedelta(days=offset)
            if not settings.is_work_day(day):
                continue
            trigger = datetime.combine(day, at)
            if trigger > now:
                return trigger
        return None

    def _cancel(self, notification_id: str) -> None:
        try:
            self._notifications.cancel_notification(notification_id)
        except Exception:
            logger.exception("Failed to cancel notification %s", notification_id)

    def _show(self, title: str, body: str, notification_id: str) -> None:
        self._notifications.show_notification(title, body, notification_id)
