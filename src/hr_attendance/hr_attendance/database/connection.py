from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import mysql.connector


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connect_timeout: int = 10
    statement_timeout_ms: int = 15000


class DatabaseConnection:
    """Connection factory shared by the MySQL repositories.

    Note: We create short-lived connections per operation. Each connection gets a
    connect timeout and a per-session statement timeout, so a slow store call fails
    instead of hanging the request.
    """

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def config(self) -> DBConfig:
        return self._config

    def connect(self):
        conn = mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            connection_timeout=int(self._config.connect_timeout),
        )
        if self._config.statement_timeout_ms:
            try:
                cur = conn.cursor()
                try:
                    cur.execute("SET SESSION MAX_EXECUTION_TIME=%s", (int(self._config.statement_timeout_ms),))
                finally:
                    cur.close()
            except Exception:
                conn.close()
                raise
        return conn


def build_db_config(db_config: dict, *, connect_timeout: Optional[int] = None, statement_timeout_ms: Optional[int] = None) -> DBConfig:
    return DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
        connect_timeout=int(connect_timeout if connect_timeout is not None else 10),
        statement_timeout_ms=int(statement_timeout_ms if statement_timeout_ms is not None else 15000),
    )
