import os

from .config import db_config_from_env, work_settings_from_env

DB_CONFIG = db_config_from_env()

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE") or None

WORK_SETTINGS = work_settings_from_env()
