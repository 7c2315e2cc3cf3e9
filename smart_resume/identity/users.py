from __future__ import annotations

import sqlite3
import uuid
from dataclasses import dataclass

from passlib.hash import pbkdf2_sha256

from smart_resume.core.config import settings
from smart_resume.core.errors import Conflict, StoreError
from smart_resume.core.sqlite import connection_lock, get_connection, utc_now

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        username TEXT NOT NULL UNIQUE,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        created_at TEXT NOT NULL
    );
    """,
)


@dataclass(frozen=True)
class User:
    id: str
    username: str
    email: str
    password_hash: str

    def summary(self) -> dict[str, str]:
        return {"id": self.id, "username": self.username, "email": self.email}


def _get_connection() -> sqlite3.Connection:
    return get_connection(settings.database_path, schema_name="users", schema=_SCHEMA)


def init_db() -> None:
    _get_connection()


def normalize_identity(value: str | None) -> str:
    return (value or "").strip().lower()


def hash_password(password: str) -> str:
    return pbkdf2_sha256.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pbkdf2_sha256.verify(password, password_hash)
    except (TypeError, ValueError):
        return False


def _row_to_user(row: tuple | None) -> User | None:
    if not row:
        return None
    return User(id=row[0], username=row[1], email=row[2], password_hash=row[3])


def find_user_by_email(email: str) -> User | None:
    conn = _get_connection()
    with connection_lock():
        row = conn.execute(
            "SELECT id, username, email, password_hash FROM users WHERE email = ?",
            (normalize_identity(email),),
        ).fetchone()
    return _row_to_user(row)


def get_user(user_id: str) -> User | None:
    conn = _get_connection()
    with connection_lock():
        row = conn.execute(
            "SELECT id, username, email, password_hash FROM users WHERE id = ?",
            (user_id,),
        ).fetchone()
    return _row_to_user(row)


def create_user(*, username: str, email: str, password: str) -> User:
    """Insert a user; a taken username or email raises ``Conflict``."""
    user = User(
        id=uuid.uuid4().hex,
        username=normalize_identity(username),
        email=normalize_identity(email),
        password_hash=hash_password(password),
    )
    conn = _get_connection()
    with connection_lock():
        existing = conn.execute(
            "SELECT 1 FROM users WHERE username = ? OR email = ?",
            (user.username, user.email),
        ).fetchone()
        if existing:
            raise Conflict("User exists")
        try:
            conn.execute(
                """
                INSERT INTO users (id, username, email, password_hash, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (user.id, user.username, user.email, user.password_hash, utc_now().isoformat()),
            )
        except sqlite3.IntegrityError as exc:
            raise Conflict("User exists") from exc
        except sqlite3.Error as exc:
            raise StoreError("Could not create user", detail=str(exc)) from exc
    return user


def clear_users() -> None:
    conn = _get_connection()
    with connection_lock():
        conn.execute("DELETE FROM users")
