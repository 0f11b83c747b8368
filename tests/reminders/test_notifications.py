from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta

import pytest

from worktime_engine.common.timers import OneShotTimer
from worktime_engine.reminders.notifications import LoggingNotificationSink

NOW = datetime(2024, 3, 13, 8, 0)


@pytest.fixture
def logging_sink():
    sink = LoggingNotificationSink(clock=lambda: NOW)
    yield sink
    sink.close()


def test_show_notification_logs(logging_sink, caplog):
    with caplog.at_level(logging.INFO):
        logging_sink.show_notification("Hello", "World", "greeting")

    assert "Notification [greeting] Hello: World" in caplog.text


def test_past_trigger_is_delivered_immediately(logging_sink, caplog):
    with caplog.at_level(logging.INFO):
        logging_sink.schedule_notification("late", "Late", "Body", NOW - timedelta(minutes=1))

    assert "Notification [late] Late: Body" in caplog.text
    assert not logging_sink.is_scheduled("late")


def test_future_trigger_waits_and_can_be_cancelled(logging_sink, caplog):
    logging_sink.schedule_notification("later", "Later", "Body", NOW + timedelta(hours=1))

    assert logging_sink.is_scheduled("later")
    logging_sink.cancel_notification("later")
    logging_sink.cancel_notification("later")

    assert not logging_sink.is_scheduled("later")
    assert "Notification [later]" not in caplog.text


def test_rescheduling_an_id_replaces_it(logging_sink, caplog):
    logging_sink.schedule_notification("x", "First", "Body", NOW + timedelta(hours=1))
    with caplog.at_level(logging.INFO):
        logging_sink.schedule_notification("x", "Second", "Body", NOW - timedelta(seconds=1))

    assert "Second" in caplog.text
    assert "First" not in caplog.text
    assert not logging_sink.is_scheduled("x")


def test_close_cancels_pending(logging_sink):
    logging_sink.schedule_notification("a", "A", "Body", NOW + timedelta(hours=1))
    logging_sink.schedule_notification("b", "B", "Body", NOW + timedelta(hours=2))

    logging_sink.close()

    assert not logging_sink.is_scheduled("a")
    assert not logging_sink.is_scheduled("b")


def test_timer_with_due_delay_fires_synchronously():
    fired = []
    timer = OneShotTimer(-5, lambda: fired.append(True)).start()

    assert fired == [True]
    assert timer.has_fired
    assert timer.delay_seconds == 0


def test_timer_fires_on_background_thread():
    done = threading.Event()
    timer = OneShotTimer(0.01, done.set, name="quick").start()

    assert done.wait(2)
    timer.join(2)
    assert timer.has_fired
    assert not timer.is_pending


def test_cancelled_timer_never_fires():
    fired = []
    timer = OneShotTimer(60, lambda: fired.append(True)).start()

    timer.cancel()
    timer.cancel()
    timer.join(2)

    assert timer.is_cancelled
    assert fired == []


def test_timer_callback_errors_are_logged(caplog):
    def boom():
        raise RuntimeError("boom")

    timer = OneShotTimer(0, boom, name="failing").start()

    assert timer.has_fired
    assert "Timer failing callback failed" in caplog.text
