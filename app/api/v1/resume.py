import logging

from fastapi import APIRouter, File, HTTPException, Request, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.rate_limit import rate_limit
from app.parsing.extract import extract_text
from app.schemas.analysis import AnalyzeResumeResponse, ErrorResponse
from app.services.analysis_service import AnalysisService
from app.services.upload_validation import (
    UploadValidationError,
    resolve_media_type,
    validate_media_type,
    validate_size,
    validate_upload_signature,
)

logger = logging.getLogger(__name__)

router = APIRouter()

READ_CHUNK_BYTES = 1024 * 64


async def _read_limited(upload: UploadFile, max_bytes: int) -> bytes:
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await upload.read(READ_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        validate_size(total, max_bytes)
        chunks.append(chunk)
    return b"".join(chunks)


def _extraction_warning(failed: bool, char_count: int, warnings: list[str]) -> str | None:
    if failed:
        detail = warnings[0] if warnings else "Text extraction failed."
        return f"Could not extract text from the resume; showing a general analysis. {detail}"
    if char_count < settings.min_resume_chars:
        return "Could not extract meaningful text from the resume; the analysis may be generic."
    return None


@router.post(
    "/analyze-resume",
    response_model=AnalyzeResumeResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@rate_limit()
async def analyze_resume(request: Request, resume: UploadFile | None = File(default=None)):
    service: AnalysisService = request.app.state.analysis_service
    request.app.state.metrics.record_request()

    if resume is None or not resume.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    filename = resume.filename
    try:
        media_type = resolve_media_type(resume.content_type, filename)
        validate_media_type(media_type)
        if resume.size is not None:
            validate_size(resume.size, settings.max_upload_bytes)
        content = await _read_limited(resume, settings.max_upload_bytes)
        validate_upload_signature(media_type=media_type, content=content)
    except UploadValidationError as exc:
        logger.info("resume_upload_rejected file=%s reason=%s", filename, exc)
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc

    try:
        extracted = await run_in_threadpool(extract_text, content, media_type)
        warning = _extraction_warning(extracted.failed, extracted.char_count, extracted.warnings)
        if warning:
            logger.warning("resume_text_insufficient file=%s chars=%s failed=%s", filename, extracted.char_count, extracted.failed)
        outcome = await run_in_threadpool(service.analyze, extracted.text, filename)
    except Exception as exc:  # noqa: BLE001 - reported to the client as a 500 envelope
        logger.exception("resume_analysis_error file=%s", filename)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to analyze resume", "message": str(exc)},
        )

    logger.info(
        "resume_analysis_done file=%s source=%s fallback_fields=%s",
        filename, outcome.source, outcome.record.fallback_fields,
    )
    return AnalyzeResumeResponse(
        success=True,
        data=outcome.record,
        cached=outcome.cached,
        extraction_warning=warning,
    )
