"""
Resume history records and the stored binaries they point at.

Records are owner-scoped: every read and delete looks the file up by
``(user_id, file_name)``, so another owner's file is indistinguishable from a
missing one. There is no transaction spanning the binary and the record; a
delete that removes the binary but not the record is reported as
``PartialFailure`` rather than hidden.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field

from smart_resume.core.config import settings
from smart_resume.core.errors import NotFound, PartialFailure, StoreError
from smart_resume.core.sqlite import connection_lock, get_connection, utc_now
from smart_resume.matching.engine import JobMatch

logger = logging.getLogger("smart_resume.records")

SNIPPET_MAX_CHARS = 500

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS resumes (
        seq INTEGER PRIMARY KEY AUTOINCREMENT,
        id TEXT NOT NULL UNIQUE,
        file_name TEXT NOT NULL UNIQUE,
        original_name TEXT NOT NULL,
        matched_job_json TEXT,
        snippet TEXT NOT NULL,
        user_id TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_resumes_owner_created
    ON resumes (user_id, created_at);
    """,
)

_COLUMNS = "id, file_name, original_name, matched_job_json, snippet, user_id, created_at, updated_at"


class MatchedJob(BaseModel):
    title: str
    description: str = ""
    matched_skills: list[str] = Field(default_factory=list)


class ResumeRecord(BaseModel):
    id: str
    file_name: str
    original_name: str
    matched_job: MatchedJob | None = None
    snippet: str = ""
    user_id: str
    created_at: datetime
    updated_at: datetime


def _get_connection() -> sqlite3.Connection:
    return get_connection(settings.database_path, schema_name="resumes", schema=_SCHEMA)


def init_db() -> None:
    _get_connection()


def make_snippet(text: str) -> str:
    return (text or "")[:SNIPPET_MAX_CHARS]


def _row_to_record(row: tuple) -> ResumeRecord:
    matched = json.loads(row[3]) if row[3] else None
    return ResumeRecord(
        id=row[0],
        file_name=row[1],
        original_name=row[2],
        matched_job=MatchedJob.model_validate(matched) if matched else None,
        snippet=row[4],
        user_id=row[5],
        created_at=datetime.fromisoformat(row[6]),
        updated_at=datetime.fromisoformat(row[7]),
    )


def create_record(
    *,
    owner_id: str,
    file_name: str,
    original_name: str,
    match: JobMatch | None,
    snippet: str,
) -> ResumeRecord:
    now = utc_now()
    matched_job = (
        MatchedJob(title=match.title, description=match.description, matched_skills=list(match.matched_skills))
        if match is not None
        else None
    )
    record = ResumeRecord(
        id=uuid.uuid4().hex,
        file_name=file_name,
        original_name=original_name,
        matched_job=matched_job,
        snippet=make_snippet(snippet),
        user_id=owner_id,
        created_at=now,
        updated_at=now,
    )
    matched_json = json.dumps(matched_job.model_dump(), ensure_ascii=False) if matched_job else None

    conn = _get_connection()
    try:
        with connection_lock():
            conn.execute(
                f"INSERT INTO resumes ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    record.id,
                    record.file_name,
                    record.original_name,
                    matched_json,
                    record.snippet,
                    record.user_id,
                    record.created_at.isoformat(),
                    record.updated_at.isoformat(),
                ),
            )
    except sqlite3.Error as exc:
        raise StoreError("Failed to analyze resume", detail=f"record insert failed: {exc}") from exc
    return record


def list_by_owner(owner_id: str) -> list[ResumeRecord]:
    conn = _get_connection()
    try:
        with connection_lock():
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM resumes WHERE user_id = ? ORDER BY created_at DESC, seq DESC",
                (owner_id,),
            ).fetchall()
    except sqlite3.Error as exc:
        raise StoreError("Server error", detail=f"history query failed: {exc}") from exc
    return [_row_to_record(row) for row in rows]


def get_record(owner_id: str, file_name: str) -> ResumeRecord | None:
    conn = _get_connection()
    try:
        with connection_lock():
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM resumes WHERE user_id = ? AND file_name = ?",
                (owner_id, file_name),
            ).fetchone()
    except sqlite3.Error as exc:
        raise StoreError("Server error", detail=f"record lookup failed: {exc}") from exc
    return _row_to_record(row) if row else None


def delete_record(owner_id: str, file_name: str) -> bool:
    conn = _get_connection()
    with connection_lock():
        cursor = conn.execute(
            "DELETE FROM resumes WHERE user_id = ? AND file_name = ?",
            (owner_id, file_name),
        )
    return cursor.rowcount > 0


def resolve_stored_path(file_name: str) -> Path | None:
    """Path of ``file_name`` inside the uploads directory, or ``None`` if it escapes it."""
    if not file_name or file_name in {".", ".."}:
        return None
    if any(sep in file_name for sep in ("/", "\\", "\x00")):
        return None
    root = Path(settings.upload_dir).resolve()
    try:
        candidate = (root / file_name).resolve()
    except (OSError, ValueError):
        return None
    if candidate.parent != root:
        return None
    return candidate


def _owned_path(owner_id: str, file_name: str) -> tuple[Path, ResumeRecord]:
    path = resolve_stored_path(file_name)
    record = get_record(owner_id, file_name) if path is not None else None
    if path is None or record is None:
        raise NotFound()
    return path, record


def fetch_file(owner_id: str, file_name: str) -> bytes:
    path, _ = _owned_path(owner_id, file_name)
    try:
        return path.read_bytes()
    except FileNotFoundError as exc:
        raise NotFound() from exc


def delete_resume(owner_id: str, file_name: str) -> ResumeRecord:
    """Remove the binary, then its record; returns the deleted record."""
    path, record = _owned_path(owner_id, file_name)
    try:
        path.unlink()
    except FileNotFoundError as exc:
        raise NotFound() from exc
    except OSError as exc:
        raise StoreError("Error deleting file or DB record", detail=f"unlink failed: {exc}") from exc

    try:
        removed = delete_record(owner_id, file_name)
    except sqlite3.Error as exc:
        logger.error("resume_delete_diverged owner=%s file=%s error=%s", owner_id, file_name, exc)
        raise PartialFailure(detail=f"record delete failed after unlink: {exc}") from exc
    if not removed:
        logger.error("resume_delete_diverged owner=%s file=%s error=record vanished", owner_id, file_name)
        raise PartialFailure(detail="record missing after unlink")

    logger.info("resume_deleted owner=%s file=%s", owner_id, file_name)
    return record


def clear_resume_records() -> None:
    conn = _get_connection()
    with connection_lock():
        conn.execute("DELETE FROM resumes")
