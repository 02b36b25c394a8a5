import os

from config.config import SCHEDULE_LOCK_TIMEOUT_SECONDS, db_config_from_env, env_bool

SECRET_KEY = "test-secret"

DB_CONFIG = db_config_from_env(default_database="school_attendance_test")

DEBUG = False
TESTING = True

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
LOG_JSON = False

LATE_THRESHOLD_MINUTES = 15

AUTO_INIT_DB = env_bool("AUTO_INIT_DB", "0")
AUTO_SEED_DB = env_bool("AUTO_SEED_DB", "0")
