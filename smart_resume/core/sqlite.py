from __future__ import annotations

import os
import sqlite3
import threading
from collections.abc import Sequence
from datetime import datetime, timezone

# One process-wide connection per database file, shared by every store.
_connections: dict[str, sqlite3.Connection] = {}
_applied_schemas: set[tuple[str, str]] = set()
_conn_lock = threading.RLock()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def get_connection(db_path: str, *, schema_name: str = "", schema: Sequence[str] = ()) -> sqlite3.Connection:
    with _conn_lock:
        conn = _connections.get(db_path)
        if conn is None:
            directory = os.path.dirname(db_path)
            if directory:
                os.makedirs(directory, exist_ok=True)

            conn = sqlite3.connect(
                db_path,
                check_same_thread=False,
                timeout=5,
                isolation_level=None,
            )
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute("PRAGMA synchronous=NORMAL;")
            conn.execute("PRAGMA busy_timeout=5000;")
            _connections[db_path] = conn

        if schema and (db_path, schema_name) not in _applied_schemas:
            for statement in schema:
                conn.execute(statement)
            _applied_schemas.add((db_path, schema_name))
        return conn


def connection_lock() -> threading.RLock:
    return _conn_lock


def close_connections() -> None:
    with _conn_lock:
        for conn in _connections.values():
            conn.close()
        _connections.clear()
        _applied_schemas.clear()
