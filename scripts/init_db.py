from __future__ import annotations

import sys
from pathlib import Path

import importlib

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.hr_attendance.hr_attendance.common.logging import get_logger, setup_logging
from src.hr_attendance.hr_attendance.database.bootstrap import apply_schema, list_tables
from src.hr_attendance.hr_attendance.database.connection import build_db_config


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    config = build_db_config(
        dict(settings.DB_CONFIG),
        connect_timeout=getattr(settings, "DB_CONNECT_TIMEOUT", None),
        statement_timeout_ms=getattr(settings, "DB_STATEMENT_TIMEOUT_MS", None),
    )
    schema_path = REPO_ROOT / "database" / "schema.sql"
    apply_schema(config, schema_path=schema_path)
    get_logger(__name__).info(
        "init_db_done",
        db=f"{config.user}@{config.host}:{config.port}/{config.database}",
        tables=len(list_tables(config)),
    )


if __name__ == "__main__":
    main()
