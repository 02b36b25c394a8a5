"""Settings shared by every environment module."""

import os


def env_bool(name: str, default: str = "0") -> bool:
    return bool(int(os.getenv(name, default)))


def env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def db_config_from_env(*, default_password: str = "", default_database: str = "school_attendance") -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": env_int("DB_PORT", 3306),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", default_password),
        "database": os.getenv("DB_NAME", default_database),
    }


# Minutes after session start during which a check-in is Late rather than Absent.
LATE_THRESHOLD_MINUTES = env_int("LATE_THRESHOLD_MINUTES", 15)

# How long a schedule write waits for the per-school lock.
SCHEDULE_LOCK_TIMEOUT_SECONDS = env_int("SCHEDULE_LOCK_TIMEOUT_SECONDS", 5)
