from __future__ import annotations

from typing import Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import User
from .repository import UserRepository


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_user(r: dict) -> User:
        return User(
            user_id=int(r["user_id"]),
            full_name=r["full_name"],
            email=r["email"],
            password_hash=r["password_hash"],
            role=Role(r["role"]),
            is_active=bool(r.get("is_active", 1)),
        )

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, full_name, email, password_hash, role, is_active
                FROM users
                WHERE user_id=%s
                """,
                (int(user_id),),
            )
            r = fetchone(cur)
            return self._to_user(r) if r else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, full_name, email, password_hash, role, is_active
                FROM users
                WHERE email=%s
                """,
                (email.strip().lower(),),
            )
            r = fetchone(cur)
            return self._to_user(r) if r else None
