from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import mysql.connector


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "tuition_portal")),
        )

    def connect_kwargs(self, *, with_database: bool = True) -> dict[str, Any]:
        """Arguments for ``mysql.connector.connect``.

        ``with_database=False`` is for server-level statements such as
        ``CREATE DATABASE`` issued before the schema exists.
        """
        kwargs: dict[str, Any] = {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "autocommit": False,
            "use_pure": True,
        }
        if with_database:
            kwargs["database"] = self.database
        return kwargs


class DatabaseConnection:
    """Opens a fresh MySQL connection for every unit of work.

    Repositories share one instance per container. ``db_cursor`` commits or
    rolls back and closes the connection, so each repository call (a monitor
    update included) runs in its own transaction.
    """

    def __init__(self, config: DBConfig):
        self._config = config

    def connect(self):
        return mysql.connector.connect(**self._config.connect_kwargs())
