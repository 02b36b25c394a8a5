from __future__ import annotations

import importlib
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.log import get_logger, setup_logging
from .common.responses import error_response
from .container import Container, build_container
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .database.connection import DBConfig
from .schedules.controller import register as register_schedules

logger = get_logger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Tests pass a container built from in-memory repositories; otherwise one is
    built from the settings module selected by APP_ENV.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    setup_logging(
        json_output=bool(getattr(settings, "LOG_JSON", False)),
        log_level=str(getattr(settings, "LOG_LEVEL", "INFO")),
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "app_starting",
            settings=settings_module,
            db=DBConfig.from_settings(db_config).describe(),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("schema_ready", tables=len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")

        container = build_container(
            db_config=db_config,
            late_threshold_minutes=int(getattr(settings, "LATE_THRESHOLD_MINUTES", 15)),
            lock_timeout_seconds=int(getattr(settings, "SCHEDULE_LOCK_TIMEOUT_SECONDS", 5)),
        )

    app.extensions["container"] = container

    register_schedules(app, container)
    register_attendance(app, container)

    @app.errorhandler(404)
    def not_found(_e):
        return error_response(404, "Route not found")

    @app.errorhandler(405)
    def method_not_allowed(_e):
        return error_response(405, "Method not allowed")

    return app
