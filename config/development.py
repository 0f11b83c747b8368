import os

from .config import db_config_from_env, work_settings_from_env

DB_CONFIG = db_config_from_env()

DEBUG = True

# If enabled, create_engine() applies database/schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_FILE = os.getenv("LOG_FILE", "logs/worktime.log")

WORK_SETTINGS = work_settings_from_env()
