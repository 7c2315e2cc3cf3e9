from __future__ import annotations

import logging
from pathlib import Path

from smart_resume.core.errors import ExtractionError
from smart_resume.ingest.uploads import StoredFile

logger = logging.getLogger("smart_resume.extract")

TEXT_EXTENSIONS = {".txt", ".md"}


def _extract_txt(file_path: Path) -> str:
    try:
        return file_path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ExtractionError("Document is not valid UTF-8 text", detail=str(exc)) from exc


def _extract_pdf(file_path: Path) -> str:
    from pypdf import PdfReader
    from pypdf.errors import PyPdfError

    try:
        reader = PdfReader(str(file_path))
        text_parts: list[str] = []
        for page in reader.pages:
            page_text = (page.extract_text() or "").strip()
            if page_text:
                text_parts.append(page_text)
    except (PyPdfError, ValueError, KeyError, TypeError, OSError) as exc:
        raise ExtractionError("Failed to analyze resume", detail=f"PDF parsing failed: {exc}") from exc
    return "\n".join(text_parts)


def _extract_docx(file_path: Path) -> str:
    from docx import Document

    try:
        document = Document(str(file_path))
    except Exception as exc:
        raise ExtractionError("Failed to analyze resume", detail=f"DOCX parsing failed: {exc}") from exc
    paragraphs = [p.text.strip() for p in document.paragraphs if p.text and p.text.strip()]
    return "\n".join(paragraphs)


def extract_text(stored: StoredFile) -> str:
    """Plain text of a stored document; unreadable input raises ``ExtractionError``."""
    path = stored.path
    if not path.exists():
        raise ExtractionError("Uploaded file is no longer available", detail=f"missing: {path}")
    if path.stat().st_size == 0:
        raise ExtractionError("Uploaded file is empty")

    extension = path.suffix.lower()
    if extension in TEXT_EXTENSIONS:
        text = _extract_txt(path)
    elif extension == ".docx":
        text = _extract_docx(path)
    else:
        text = _extract_pdf(path)

    if not text.strip():
        logger.info("extract_no_text file=%s", stored.file_name)
    return text
