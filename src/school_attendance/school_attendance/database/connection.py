from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import mysql.connector


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str

    @classmethod
    def from_settings(cls, db_config: Mapping[str, Any]) -> "DBConfig":
        """Build from the DB_CONFIG dict of a settings module."""
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "school_attendance")),
        )

    def describe(self) -> str:
        return f"{self.user}@{self.host}:{self.port}/{self.database}"

    def connect(self, *, with_database: bool = True):
        kwargs: dict[str, Any] = dict(host=self.host, port=self.port, user=self.user, password=self.password)
        if with_database:
            kwargs["database"] = self.database
        return mysql.connector.connect(**kwargs)


class DatabaseConnection:
    """Connection factory handed to every MySQL repository.

    Each repository call opens a short-lived connection and closes it again;
    one factory is kept per distinct DBConfig.
    """

    _instances: dict[DBConfig, "DatabaseConnection"] = {}

    def __init__(self, config: DBConfig):
        self._config = config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if config not in cls._instances:
            cls._instances[config] = DatabaseConnection(config)
        return cls._instances[config]

    @property
    def database(self) -> str:
        return self._config.database

    def connect(self):
        return self._config.connect()
