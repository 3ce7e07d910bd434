from fastapi import APIRouter, Request

from app.schemas.analysis import HealthResponse

router = APIRouter()

@router.get("/health", summary="Health Check", description="Check the health status of the application.", response_model=HealthResponse)
async def health_check():
    return {"status": "OK", "message": "CareerScope AI Backend is running"}


@router.get("/metrics", summary="Pipeline Metrics", description="Request, model-call and cache counters for this process.")
async def metrics(request: Request):
    state = request.app.state
    return {
        "counters": state.metrics.snapshot(),
        "quota_warning_threshold": state.metrics.quota_warning_threshold,
        "cache": state.result_cache.stats(),
    }
