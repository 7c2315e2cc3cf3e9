from __future__ import annotations

import secrets
import sqlite3
from datetime import datetime, timedelta

from smart_resume.core.config import settings
from smart_resume.core.sqlite import connection_lock, get_connection, utc_now

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS sessions (
        session_id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        created_at TEXT NOT NULL,
        expires_at TEXT NOT NULL
    );
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_sessions_expiry
    ON sessions (expires_at);
    """,
)


def _get_connection() -> sqlite3.Connection:
    return get_connection(settings.database_path, schema_name="sessions", schema=_SCHEMA)


def init_db() -> None:
    _get_connection()


def purge_expired_sessions() -> int:
    conn = _get_connection()
    now_iso = utc_now().isoformat()
    with connection_lock():
        cursor = conn.execute("DELETE FROM sessions WHERE expires_at <= ?", (now_iso,))
    return cursor.rowcount


def create_session(user_id: str) -> tuple[str, datetime]:
    created_at = utc_now()
    expires_at = created_at + timedelta(seconds=settings.session_ttl_seconds)
    session_id = secrets.token_urlsafe(32)

    conn = _get_connection()
    with connection_lock():
        conn.execute(
            """
            INSERT INTO sessions (session_id, user_id, created_at, expires_at)
            VALUES (?, ?, ?, ?)
            """,
            (session_id, user_id, created_at.isoformat(), expires_at.isoformat()),
        )
    return session_id, expires_at


def resolve_session(session_id: str) -> str | None:
    if not session_id:
        return None
    conn = _get_connection()
    with connection_lock():
        row = conn.execute(
            "SELECT user_id, expires_at FROM sessions WHERE session_id = ?",
            (session_id,),
        ).fetchone()
    if not row:
        return None
    if datetime.fromisoformat(row[1]) <= utc_now():
        destroy_session(session_id)
        return None
    return row[0]


def destroy_session(session_id: str) -> bool:
    if not session_id:
        return False
    conn = _get_connection()
    with connection_lock():
        cursor = conn.execute("DELETE FROM sessions WHERE session_id = ?", (session_id,))
    return cursor.rowcount > 0


def clear_sessions() -> None:
    conn = _get_connection()
    with connection_lock():
        conn.execute("DELETE FROM sessions")
