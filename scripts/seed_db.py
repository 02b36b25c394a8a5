from __future__ import annotations

import importlib
from pathlib import Path

from dotenv import load_dotenv

from config import get_settings_module
from school_attendance.common.log import setup_logging
from school_attendance.database.bootstrap import apply_seed_sql
from school_attendance.database.connection import DBConfig


def main() -> None:
    load_dotenv(override=False)
    setup_logging()
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    seed_path = Path(__file__).resolve().parents[1] / "database" / "seed.sql"
    apply_seed_sql(db_config, seed_path=seed_path)

    print(f"OK: Seeded database -> {DBConfig.from_settings(db_config).describe()}")


if __name__ == "__main__":
    main()
