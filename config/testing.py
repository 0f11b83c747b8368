import os

from .config import db_config_from_env

DB_CONFIG = db_config_from_env(default_database="worktime_test")

DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

LOG_LEVEL = "WARNING"
LOG_FILE = None

# Tests run against the built-in defaults.
WORK_SETTINGS = {}
