from __future__ import annotations

from io import BytesIO
from typing import Any
from zipfile import ZipFile

from app.parsing.extract import normalize_media_type
from app.parsing.models import DOC_MEDIA_TYPE, DOCX_MEDIA_TYPE, MEDIA_TYPE_SOURCES, PDF_MEDIA_TYPE

PDF_MAGIC = b"%PDF-"
OLE_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"
ZIP_MAGICS = (b"PK\x03\x04", b"PK\x05\x06", b"PK\x07\x08")

EXTENSION_MEDIA_TYPES = {
    "pdf": PDF_MEDIA_TYPE,
    "docx": DOCX_MEDIA_TYPE,
    "doc": DOC_MEDIA_TYPE,
}

GENERIC_MEDIA_TYPES = {"", "application/octet-stream", "binary/octet-stream"}


class UploadValidationError(ValueError):
    def __init__(self, message: str, *, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


def _safe_str(value: Any, max_len: int = 255) -> str:
    if value is None:
        return ""
    text = str(value).strip()
    if not text:
        return ""
    return text[:max_len]


def extension_from_filename(filename: str) -> str:
    if "." not in filename:
        return ""
    return _safe_str(filename.rsplit(".", 1)[-1], 20).lower()


def resolve_media_type(declared: str | None, filename: str) -> str:
    """Use the declared media type, or the file extension when the browser sent a generic one."""
    media_type = normalize_media_type(declared)
    if media_type in GENERIC_MEDIA_TYPES:
        return EXTENSION_MEDIA_TYPES.get(extension_from_filename(filename), media_type)
    return media_type


def validate_media_type(media_type: str) -> None:
    if media_type not in MEDIA_TYPE_SOURCES:
        raise UploadValidationError("Invalid file type. Only PDF and DOCX files are allowed.")


def validate_size(size: int, max_bytes: int) -> None:
    if size > max_bytes:
        raise UploadValidationError(f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB.")


def _is_zip_payload(content: bytes) -> bool:
    return any(content.startswith(prefix) for prefix in ZIP_MAGICS)


def _zip_has_paths(content: bytes, prefixes: tuple[str, ...]) -> bool:
    try:
        with ZipFile(BytesIO(content)) as archive:
            names = archive.namelist()
        return any(any(name.startswith(prefix) for prefix in prefixes) for name in names)
    except Exception:
        return False


def validate_upload_signature(*, media_type: str, content: bytes) -> None:
    if not content:
        raise UploadValidationError("No file uploaded")

    if media_type == PDF_MEDIA_TYPE:
        if not content.startswith(PDF_MAGIC):
            raise UploadValidationError("File signature does not match .pdf content.")
        return

    if media_type == DOCX_MEDIA_TYPE:
        if not _is_zip_payload(content) or not _zip_has_paths(content, ("word/",)):
            raise UploadValidationError("File signature does not match .docx content.")
        return

    if media_type == DOC_MEDIA_TYPE and not content.startswith(OLE_MAGIC):
        raise UploadValidationError("File signature does not match .doc content.")
