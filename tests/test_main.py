from __future__ import annotations

from datetime import date, datetime

from worktime_engine import main
from worktime_engine.container import build_container
from worktime_engine.core.constants import EVENING_REMINDER_ID, PAUSE_REMINDER_ID
from worktime_engine.core.enums import EntryType, TrackingStatus


def test_create_engine_uses_testing_settings(monkeypatch, store, sink, clock):
    monkeypatch.setenv("APP_ENV", "testing")
    monkeypatch.setenv("AUTO_INIT_DB", "0")
    captured = {}

    def fake_build(*, db_config, settings=None, notifications=None):
        captured["db_config"] = db_config
        return build_container(store=store, settings=settings, notifications=sink, clock=clock)

    monkeypatch.setattr(main, "build_mysql_container", fake_build)
    monkeypatch.setattr(main, "setup_logger", lambda *args: captured.setdefault("logger", args))

    container = main.create_engine()
    try:
        assert captured["db_config"]["database"]
        assert captured["logger"] == ("worktime_engine", "WARNING", None)
        assert container.tracking_service.current_status == TrackingStatus.IDLE
        assert len(store.achievements) == 15
        assert "reminder_morning" in sink.scheduled
    finally:
        container.close()


def test_create_engine_delivers_overdue_pause_reminder_once(monkeypatch, store, sink, clock):
    monkeypatch.setenv("APP_ENV", "testing")
    monkeypatch.setenv("AUTO_INIT_DB", "0")
    day = store.add_day(date(2024, 3, 13))
    store.add_entry(day, datetime(2024, 3, 13, 8, 0), EntryType.CHECK_IN)
    clock.set(datetime(2024, 3, 13, 14, 30))
    monkeypatch.setattr(
        main,
        "build_mysql_container",
        lambda *, db_config, settings=None, notifications=None: build_container(
            store=store, settings=settings, notifications=sink, clock=clock
        ),
    )
    monkeypatch.setattr(main, "setup_logger", lambda *args: None)

    container = main.create_engine()
    try:
        assert container.tracking_service.current_status == TrackingStatus.WORKING
        assert sink.shown_ids().count(PAUSE_REMINDER_ID) == 1
        assert sink.scheduled[EVENING_REMINDER_ID][2] == datetime(2024, 3, 13, 18, 0)
    finally:
        container.close()
