from __future__ import annotations

import importlib
from pathlib import Path

from dotenv import load_dotenv

from config import get_settings_module
from school_attendance.common.log import setup_logging
from school_attendance.database.bootstrap import apply_schema, list_tables
from school_attendance.database.connection import DBConfig


def main() -> None:
    load_dotenv(override=False)
    setup_logging()
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    schema_path = Path(__file__).resolve().parents[1] / "database" / "schema.sql"
    apply_schema(db_config, schema_path=schema_path)
    tables = list_tables(db_config)
    print(f"OK: Applied schema.sql -> {DBConfig.from_settings(db_config).describe()} (tables={len(tables)})")


if __name__ == "__main__":
    main()
