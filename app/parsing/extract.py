from __future__ import annotations

import logging
import re
from io import BytesIO

from docx import Document
from pypdf import PdfReader

from .models import MEDIA_TYPE_SOURCES, ExtractedText, UnsupportedMediaTypeError

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_media_type(media_type: str | None) -> str:
    return (media_type or "").split(";")[0].strip().lower()


def _extract_pdf(content: bytes) -> tuple[str, int]:
    reader = PdfReader(BytesIO(content))
    pages: list[str] = []
    for page in reader.pages:
        page_text = _WHITESPACE_RE.sub(" ", page.extract_text() or "").strip()
        if page_text:
            pages.append(page_text)
    return " ".join(pages), len(reader.pages)


def _extract_docx(content: bytes) -> str:
    document = Document(BytesIO(content))
    lines = [p.text.strip() for p in document.paragraphs if p.text and p.text.strip()]
    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text and cell.text.strip()]
            if cells:
                lines.append(" | ".join(cells))
    return "\n".join(lines)


def extract_text(content: bytes, media_type: str) -> ExtractedText:
    """Extract plain text from an uploaded résumé.

    Parse failures never raise: they come back as an empty ``ExtractedText``
    with ``failed=True`` and a warning. Only a media type outside the
    allow-list raises ``UnsupportedMediaTypeError``.
    """
    normalized = normalize_media_type(media_type)
    source_type = MEDIA_TYPE_SOURCES.get(normalized)
    if source_type is None:
        raise UnsupportedMediaTypeError(f"Unsupported media type '{normalized or 'unknown'}'.")

    if source_type == "doc":
        return ExtractedText(
            source_type=source_type,
            failed=True,
            warnings=["Legacy .doc files cannot be read. Save the resume as PDF or DOCX for a full analysis."],
        )

    try:
        if source_type == "pdf":
            text, page_count = _extract_pdf(content)
        else:
            text, page_count = _extract_docx(content), None
    except Exception as exc:  # noqa: BLE001 - parser libraries raise many unrelated types
        logger.warning("resume_text_extraction_failed source=%s bytes=%s: %s", source_type, len(content), exc)
        return ExtractedText(
            source_type=source_type,
            failed=True,
            warnings=[f"{source_type.upper()} parsing failed: {exc}"],
        )

    warnings: list[str] = []
    if not text.strip():
        warnings.append(f"No extractable text found in {source_type.upper()}.")
    return ExtractedText(source_type=source_type, text=text, page_count=page_count, warnings=warnings)
