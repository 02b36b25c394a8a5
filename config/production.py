import os

from config.config import LATE_THRESHOLD_MINUTES, SCHEDULE_LOCK_TIMEOUT_SECONDS, db_config_from_env, env_bool

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = db_config_from_env()

DEBUG = False

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = env_bool("LOG_JSON", "1")

AUTO_INIT_DB = env_bool("AUTO_INIT_DB", "0")
AUTO_SEED_DB = env_bool("AUTO_SEED_DB", "0")
