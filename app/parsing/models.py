from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

PDF_MEDIA_TYPE = "application/pdf"
DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC_MEDIA_TYPE = "application/msword"

MEDIA_TYPE_SOURCES = {
    PDF_MEDIA_TYPE: "pdf",
    DOCX_MEDIA_TYPE: "docx",
    DOC_MEDIA_TYPE: "doc",
}


class UnsupportedMediaTypeError(ValueError):
    pass


class ExtractedText(BaseModel):
    source_type: str
    text: str = ""
    page_count: int | None = None
    warnings: list[str] = Field(default_factory=list)
    failed: bool = False

    @field_validator("source_type")
    @classmethod
    def _validate_source_type(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in {"pdf", "docx", "doc"}:
            raise ValueError("source_type must be one of: pdf, docx, doc")
        return normalized

    @property
    def char_count(self) -> int:
        return len(self.text.strip())
