from __future__ import annotations

import asyncio
import logging
import os
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from fastapi import UploadFile
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from smart_resume.core.config import settings
from smart_resume.core.errors import ValidationError

logger = logging.getLogger("smart_resume.ingest")

MAX_UPLOAD_BYTES = 5 * 1024 * 1024  # 5 MiB
MULTIPART_OVERHEAD_BYTES = 64 * 1024
READ_CHUNK_BYTES = 64 * 1024

_UNSAFE_NAME_CHARS = re.compile(r"[^\w.() -]+")


@dataclass(frozen=True)
class StoredFile:
    file_name: str
    original_name: str
    path: Path
    size: int
    owner_id: str


def too_large_message() -> str:
    return f"File too large. Maximum allowed size is {MAX_UPLOAD_BYTES // (1024 * 1024)} MB."


def upload_dir() -> Path:
    return Path(settings.upload_dir)


def safe_original_name(filename: str | None) -> str:
    base = os.path.basename((filename or "").replace("\\", "/")).strip()
    cleaned = _UNSAFE_NAME_CHARS.sub("_", base).strip(". ")
    return cleaned[:200] or "resume.pdf"


def _open_unique(directory: Path, original_name: str) -> tuple[str, BinaryIO]:
    directory.mkdir(parents=True, exist_ok=True)
    stamp = int(time.time() * 1000)
    while True:
        file_name = f"{stamp}-{original_name}"
        try:
            return file_name, open(directory / file_name, "xb")
        except FileExistsError:
            stamp += 1


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("upload_cleanup_failed path=%s error=%s", path, exc)


async def ingest(owner_id: str, upload: UploadFile | None, declared_size: int | None = None) -> StoredFile:
    """Stream an upload into the uploads directory under a collision-free name."""
    if upload is None or not (upload.filename or "").strip():
        raise ValidationError("No file uploaded")
    if declared_size is not None and declared_size > MAX_UPLOAD_BYTES:
        raise ValidationError(too_large_message())

    original_name = safe_original_name(upload.filename)
    file_name, handle = await asyncio.to_thread(_open_unique, upload_dir(), original_name)
    path = upload_dir() / file_name
    total = 0
    try:
        while True:
            chunk = await upload.read(READ_CHUNK_BYTES)
            if not chunk:
                break
            total += len(chunk)
            if total > MAX_UPLOAD_BYTES:
                raise ValidationError(too_large_message())
            await asyncio.to_thread(handle.write, chunk)
        if total == 0:
            raise ValidationError("Uploaded file is empty")
    except BaseException:
        await asyncio.to_thread(handle.close)
        await asyncio.to_thread(_discard, path)
        raise
    await asyncio.to_thread(handle.close)

    logger.info("upload_stored owner=%s file=%s bytes=%d", owner_id, file_name, total)
    return StoredFile(
        file_name=file_name,
        original_name=upload.filename or original_name,
        path=path,
        size=total,
        owner_id=owner_id,
    )


def discard_stored_file(stored: StoredFile) -> None:
    _discard(stored.path)


class UploadSizeLimitMiddleware(BaseHTTPMiddleware):
    """Rejects oversized upload requests from their Content-Length before the body is read."""

    def __init__(self, app, paths: tuple[str, ...]):
        super().__init__(app)
        self.paths = paths

    async def dispatch(self, request, call_next):
        if request.method == "POST" and request.url.path in self.paths:
            raw_length = request.headers.get("content-length", "")
            if raw_length.isdigit() and int(raw_length) > MAX_UPLOAD_BYTES + MULTIPART_OVERHEAD_BYTES:
                logger.info("upload_rejected_at_transport bytes=%s", raw_length)
                return JSONResponse(
                    status_code=400,
                    content={"message": too_large_message(), "error": "ValidationError"},
                )
        return await call_next(request)
