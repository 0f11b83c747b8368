from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv

from config import get_settings_module

from .common.logging_utils import setup_logger
from .container import Container, build_mysql_container
from .database.bootstrap import DEFAULT_SCHEMA_PATH, apply_schema
from .database.connection import DBConfig
from .settings.model import WorkSettings

logger = logging.getLogger(__name__)


def create_engine() -> Container:
    """Build a ready-to-use engine from the environment-selected config module."""
    # Load environment variables from .env (if present) without overriding real env vars.
    load_dotenv(override=False)

    settings_module = importlib.import_module(get_settings_module())
    setup_logger(
        "worktime_engine",
        getattr(settings_module, "LOG_LEVEL", "INFO"),
        getattr(settings_module, "LOG_FILE", None),
    )

    db_config = dict(settings_module.DB_CONFIG)
    if bool(getattr(settings_module, "AUTO_INIT_DB", False)):
        apply_schema(DBConfig.from_mapping(db_config), schema_path=DEFAULT_SCHEMA_PATH)

    work_settings = WorkSettings.from_mapping(getattr(settings_module, "WORK_SETTINGS", {}))
    container = build_mysql_container(db_config=db_config, settings=work_settings)

    container.achievement_service.initialize()
    container.reminder_scheduler.initialize()
    container.tracking_service.load_status()
    logger.info(
        "Engine ready (%s, status=%s)",
        settings_module.__name__,
        container.tracking_service.current_status.value,
    )
    return container
