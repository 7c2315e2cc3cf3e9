from __future__ import annotations

import asyncio
import logging

from fastapi import UploadFile
from pydantic import BaseModel

from smart_resume.core.errors import ExtractionError, StoreError
from smart_resume.ingest.uploads import discard_stored_file, ingest
from smart_resume.matching.engine import JobMatch, match_job
from smart_resume.parsing.extract import extract_text
from smart_resume.records import store
from smart_resume.records.store import ResumeRecord

logger = logging.getLogger("smart_resume.pipeline")

NO_MATCH_MESSAGE = "No suitable job match found"
MATCH_MESSAGE = "Resume analyzed"


class AnalyzeResult(BaseModel):
    text_length: int
    snippet: str
    job_match: JobMatch | None = None
    record: ResumeRecord

    @property
    def message(self) -> str:
        return MATCH_MESSAGE if self.job_match is not None else NO_MATCH_MESSAGE


async def analyze_resume(owner_id: str, upload: UploadFile | None, declared_size: int | None = None) -> AnalyzeResult:
    """Ingest, extract, match and persist one upload for ``owner_id``, in that order."""
    stored = await ingest(owner_id, upload, declared_size)

    try:
        text = await asyncio.to_thread(extract_text, stored)
    except ExtractionError:
        await asyncio.to_thread(discard_stored_file, stored)
        raise
    except Exception as exc:
        await asyncio.to_thread(discard_stored_file, stored)
        raise ExtractionError(detail=f"{type(exc).__name__}: {exc}") from exc

    job_match = match_job(text)
    snippet = store.make_snippet(text)

    try:
        record = await asyncio.to_thread(
            store.create_record,
            owner_id=owner_id,
            file_name=stored.file_name,
            original_name=stored.original_name,
            match=job_match,
            snippet=snippet,
        )
    except StoreError:
        await asyncio.to_thread(discard_stored_file, stored)
        raise

    logger.info(
        "resume_analyzed owner=%s file=%s chars=%d matched=%s",
        owner_id,
        stored.file_name,
        len(text),
        job_match.title if job_match else "-",
    )
    return AnalyzeResult(text_length=len(text), snippet=snippet, job_match=job_match, record=record)


async def list_history(owner_id: str) -> list[ResumeRecord]:
    return await asyncio.to_thread(store.list_by_owner, owner_id)


async def fetch_resume_file(owner_id: str, file_name: str) -> bytes:
    return await asyncio.to_thread(store.fetch_file, owner_id, file_name)


async def delete_resume(owner_id: str, file_name: str) -> ResumeRecord:
    return await asyncio.to_thread(store.delete_resume, owner_id, file_name)
