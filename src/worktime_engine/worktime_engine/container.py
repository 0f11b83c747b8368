from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from .achievements.service import AchievementService
from .calculation.service import CalculationService
from .common.datetime_utils import now_local
from .database.connection import DBConfig, DatabaseConnection
from .reminders.notifications import LoggingNotificationSink, NotificationSink
from .reminders.service import ReminderScheduler
from .settings.model import WorkSettings
from .settings.provider import StaticSettingsProvider
from .tracking.service import TimeTrackingService
from .workdays.mysql_record_store import MySQLRecordStore
from .workdays.repository import RecordStore


@dataclass(frozen=True)
class Container:
    store: RecordStore
    settings_provider: StaticSettingsProvider
    notifications: NotificationSink

    calculation_service: CalculationService
    tracking_service: TimeTrackingService
    reminder_scheduler: ReminderScheduler
    achievement_service: AchievementService

    def update_settings(self, **changes: Any) -> WorkSettings:
        """Replace settings and rebuild every pending reminder from them."""
        settings = self.settings_provider.get_settings().with_changes(**changes)
        self.settings_provider.replace(settings)
        self.reminder_scheduler.reschedule()
        return settings

    def close(self) -> None:
        self.reminder_scheduler.close()
        close = getattr(self.notifications, "close", None)
        if callable(close):
            close()


def build_container(
    *,
    store: RecordStore,
    settings: Optional[WorkSettings] = None,
    notifications: Optional[NotificationSink] = None,
    clock: Callable[[], datetime] = now_local,
) -> Container:
    settings_provider = StaticSettingsProvider(settings)
    notifications = notifications or LoggingNotificationSink(clock=clock)

    calculation_service = CalculationService(store, settings_provider, clock=clock)
    tracking_service = TimeTrackingService(store, calculation_service, settings_provider, clock=clock)
    reminder_scheduler = ReminderScheduler(
        notifications,
        tracking_service,
        calculation_service,
        settings_provider,
        clock=clock,
    )
    achievement_service = AchievementService(store, settings_provider, clock=clock)

    return Container(
        store=store,
        settings_provider=settings_provider,
        notifications=notifications,
        calculation_service=calculation_service,
        tracking_service=tracking_service,
        reminder_scheduler=reminder_scheduler,
        achievement_service=achievement_service,
    )


def build_mysql_container(
    *,
    db_config: dict,
    settings: Optional[WorkSettings] = None,
    notifications: Optional[NotificationSink] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    return build_container(store=MySQLRecordStore(conn), settings=settings, notifications=notifications)
