from contextlib import asynccontextmanager
import logging

from app.services.career_ranges import get_career_config

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    get_career_config()
    cache = app.state.result_cache
    if cache.enabled:
        cache.directory.mkdir(parents=True, exist_ok=True)
    provider = app.state.ai_client
    configured = getattr(provider, "configured", lambda: True)()
    if not configured:
        logger.warning("generation_client_not_configured: GOOGLE_API_KEY is missing, every analysis will use fallback data")
    logger.info("startup cache_dir=%s cache_enabled=%s", cache.directory, cache.enabled)
    yield
    logger.info("shutdown metrics=%s", app.state.metrics.snapshot())
