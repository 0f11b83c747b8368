from __future__ import annotations

from datetime import date, datetime

import pytest

from worktime_engine.core.constants import (
    ALL_REMINDER_IDS,
    EVENING_REMINDER_ID,
    MORNING_REMINDER_ID,
    OVERTIME_REMINDER_ID,
    PAUSE_REMINDER_ID,
    WEEKLY_SUMMARY_ID,
)
from worktime_engine.core.enums import EntryType, TrackingStatus
from worktime_engine.reminders.messages import format_balance_hours
from worktime_engine.reminders.service import ReminderScheduler


def at(hour: int, minute: int = 0, day: int = 13) -> datetime:
    return datetime(2024, 3, day, hour, minute)


@pytest.fixture
def scheduler(sink, tracking, calculation, settings_provider, clock):
    scheduler = ReminderScheduler(sink, tracking, calculation, settings_provider, clock=clock)
    yield scheduler
    scheduler.close()


def test_check_in_arms_session_timers_and_cancels_morning(scheduler, tracking, sink):
    tracking.check_in()

    assert MORNING_REMINDER_ID in sink.cancelled
    assert scheduler.pause_timer.delay_seconds == 6 * 3600
    assert scheduler.overtime_timer.delay_seconds == 10 * 3600
    assert scheduler.pause_timer.is_pending


def test_break_stops_only_the_pause_timer(scheduler, tracking, clock):
    tracking.check_in()
    overtime = scheduler.overtime_timer
    pause = scheduler.pause_timer
    clock.advance(hours=2)

    tracking.start_pause()

    assert scheduler.pause_timer is None
    assert pause.is_cancelled
    assert scheduler.overtime_timer is overtime
    assert overtime.is_pending


def test_check_out_schedules_next_reminders(scheduler, tracking, clock, sink):
    tracking.check_in()
    clock.set(at(16, 30))

    tracking.check_out()

    assert scheduler.pause_timer is None
    assert scheduler.overtime_timer is None
    assert sink.scheduled[MORNING_REMINDER_ID][2] == at(7, 30, day=14)
    assert sink.scheduled[EVENING_REMINDER_ID][2] == at(18, day=14)
    title, body, trigger = sink.scheduled[WEEKLY_SUMMARY_ID]
    assert trigger == datetime(2024, 3, 18, 7, 30)
    assert title == "Weekly summary (week 11)"
    assert body == "Worked 8.0h of 40.0h, balance -32.0h."


def test_friday_check_out_skips_the_weekend(scheduler, tracking, clock, sink):
    clock.set(at(8, day=15))
    tracking.check_in()
    clock.set(at(16, day=15))

    tracking.check_out()

    assert sink.scheduled[MORNING_REMINDER_ID][2] == datetime(2024, 3, 18, 7, 30)
    assert sink.scheduled[EVENING_REMINDER_ID][2] == datetime(2024, 3, 18, 18, 0)


def test_initialize_while_working_keeps_todays_evening(scheduler, tracking, clock, sink):
    tracking.check_in()
    clock.set(at(9))

    scheduler.initialize()

    assert sink.scheduled[EVENING_REMINDER_ID][2] == at(18)
    assert sink.scheduled[MORNING_REMINDER_ID][2] == at(7, 30, day=14)


def test_rehydrated_session_fires_overdue_pause_reminder(scheduler, store, tracking, clock, sink):
    day = store.add_day(date(2024, 3, 13))
    store.add_entry(day, at(8), EntryType.CHECK_IN)
    clock.set(at(14, 30))

    assert tracking.load_status() == TrackingStatus.WORKING

    assert sink.shown_ids() == [PAUSE_REMINDER_ID]
    assert "6 hours" in sink.shown[0][2]
    assert scheduler.pause_timer.has_fired
    assert OVERTIME_REMINDER_ID not in sink.shown_ids()
    assert scheduler.overtime_timer.delay_seconds == 12600


def test_reschedule_cancels_everything_first(scheduler, sink):
    scheduler.reschedule()

    assert set(ALL_REMINDER_IDS) <= set(sink.cancelled)
    assert {MORNING_REMINDER_ID, EVENING_REMINDER_ID, WEEKLY_SUMMARY_ID} <= set(sink.scheduled)


def test_disabled_reminders_are_not_scheduled(scheduler, tracking, settings_provider, settings, clock, sink):
    settings_provider.replace(
        settings.with_changes(
            morning_reminder_enabled=False,
            evening_reminder_enabled=False,
            weekly_summary_enabled=False,
            pause_reminder_enabled=False,
            overtime_warning_enabled=False,
        )
    )
    tracking.check_in()
    clock.set(at(17))
    tracking.check_out()

    assert sink.scheduled == {}
    assert scheduler.pause_timer is None
    assert scheduler.overtime_timer is None


def test_close_is_idempotent_and_unsubscribes(scheduler, tracking, sink):
    before = tracking.status_changed.listener_count

    scheduler.close()
    scheduler.close()
    tracking.check_in()

    assert tracking.status_changed.listener_count == before - 1
    assert scheduler.pause_timer is None
    assert MORNING_REMINDER_ID not in sink.cancelled


class BrokenSink:
    def show_notification(self, title, body, notification_id=None):
        raise RuntimeError("sink down")

    def schedule_notification(self, notification_id, title, body, trigger_at):
        raise RuntimeError("sink down")

    def cancel_notification(self, notification_id):
        raise RuntimeError("sink down")


def test_failing_sink_does_not_break_tracking(tracking, calculation, settings_provider, clock, caplog):
    scheduler = ReminderScheduler(BrokenSink(), tracking, calculation, settings_provider, clock=clock)
    try:
        tracking.check_in()
        clock.set(at(16))
        tracking.check_out()
    finally:
        scheduler.close()

    assert tracking.current_status == TrackingStatus.IDLE
    assert "Failed to update reminders" in caplog.text


@pytest.mark.parametrize(
    "minutes, expected",
    [(90, "+1.5h"), (-90, "-1.5h"), (0, "0.0h")],
)
def test_format_balance_hours(minutes, expected):
    assert format_balance_hours(minutes) == expected


def test_initialize_after_rehydration_does_not_repeat_pause_reminder(scheduler, store, tracking, clock, sink):
    day = store.add_day(date(2024, 3, 13))
    store.add_entry(day, at(8), EntryType.CHECK_IN)
    clock.set(at(14, 30))

    scheduler.initialize()
    tracking.load_status()
    scheduler.initialize()

    assert sink.shown_ids().count(PAUSE_REMINDER_ID) == 1


def test_pause_reminder_fired_from_timer_uses_pause_hours(scheduler, store, tracking, clock, sink):
    day = store.add_day(date(2024, 3, 13))
    store.add_entry(day, at(8), EntryType.CHECK_IN)
    clock.set(datetime(2024, 3, 13, 13, 59, 59))

    tracking.load_status()
    timer = scheduler.pause_timer
    assert timer.delay_seconds == 1
    timer.join(5)

    assert timer.has_fired
    assert sink.shown_ids() == [PAUSE_REMINDER_ID]
    assert sink.shown[0][2] == "You have been working for 6 hours. Take a break."


def test_check_in_moves_evening_reminder_to_today(scheduler, tracking, clock, sink):
    clock.set(at(7))
    scheduler.initialize()
    assert sink.scheduled[EVENING_REMINDER_ID][2] == at(18, day=14)

    clock.set(at(8))
    tracking.check_in()

    assert sink.scheduled[EVENING_REMINDER_ID][2] == at(18)


def test_reschedule_while_working_rearms_timers(scheduler, tracking, clock):
    tracking.check_in()
    clock.advance(hours=1)
    old = scheduler.pause_timer

    scheduler.reschedule()

    assert old.is_cancelled
    assert scheduler.pause_timer is not old
    assert scheduler.pause_timer.is_pending
