import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler
from starlette.exceptions import HTTPException
import sentry_sdk

from app.ai.factory import get_ai_client
from app.api.v1.health import router as health_router
from app.api.v1.resume import router as resume_router
from app.core.cors import cors_allow_credentials, cors_allow_origin_regex, cors_allowed_origins
from app.core.metrics import MetricsCollector
from app.core.rate_limit import limiter
from app.core.result_cache import ResultCache
from app.core.config import settings
from dotenv import load_dotenv
from app.core.lifespan import lifespan
from app.services.analysis_service import AnalysisService

load_dotenv()
logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

app = FastAPI(title="CareerScope AI API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allowed_origins(),
    allow_origin_regex=cors_allow_origin_regex(),
    allow_credentials=cors_allow_credentials(),
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(HTTPException)
async def http_error_envelope(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_envelope(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid request", "message": str(exc.errors())})


app.state.metrics = MetricsCollector(quota_warning_threshold=settings.quota_warning_threshold)
app.state.result_cache = ResultCache(settings.result_cache_dir, enabled=settings.result_cache_enabled)
app.state.ai_client = get_ai_client()
app.state.analysis_service = AnalysisService(
    client=app.state.ai_client,
    cache=app.state.result_cache,
    metrics=app.state.metrics,
)

app.include_router(health_router, prefix="/api", tags=["Health"])
app.include_router(resume_router, prefix="/api", tags=["Resume"])


def run() -> None:
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
