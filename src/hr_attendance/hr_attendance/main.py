from __future__ import annotations

import importlib
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.http import register_error_handlers
from .common.logging import get_logger, setup_logging
from .database.bootstrap import apply_schema, list_tables
from .database.connection import build_db_config

from .container import Container, build_container
from .attendance.controller import register as register_attendance
from .reports.controller import register as register_reports

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    A prebuilt ``container`` (e.g. over in-memory repositories) skips every
    database step.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["ENVIRONMENT"] = getattr(settings, "ENVIRONMENT", "development")
    app.config["EXPOSE_GEO_DEBUG"] = bool(getattr(settings, "EXPOSE_GEO_DEBUG", False))

    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    log = get_logger(__name__)
    log.info("app_starting", settings=settings_module, environment=app.config["ENVIRONMENT"])

    if container is None:
        connect_timeout = getattr(settings, "DB_CONNECT_TIMEOUT", None)
        statement_timeout_ms = getattr(settings, "DB_STATEMENT_TIMEOUT_MS", None)

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            config = build_db_config(
                db_config,
                connect_timeout=connect_timeout,
                statement_timeout_ms=statement_timeout_ms,
            )
            apply_schema(config, schema_path=SCHEMA_PATH)
            log.info(
                "schema_ready",
                db=f"{config.user}@{config.host}:{config.port}/{config.database}",
                tables=len(list_tables(config)),
            )

        container = build_container(
            db_config=db_config,
            connect_timeout=connect_timeout,
            statement_timeout_ms=statement_timeout_ms,
            geofence_radius_m=float(getattr(settings, "GEOFENCE_RADIUS_METERS", 500)),
        )

    register_error_handlers(app)
    register_attendance(app, container)
    register_reports(app, container)

    return app
