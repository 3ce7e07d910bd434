from app.ai.config import AIConfig, load_ai_config
from app.ai.types import AIClient

from app.ai.providers.gemini_provider import GeminiProvider


def get_ai_client(cfg: AIConfig | None = None) -> AIClient:
    cfg = cfg or load_ai_config()

    if cfg.provider == "gemini":
        return GeminiProvider(
            model=cfg.model,
            api_key=cfg.api_key,
            max_attempts=cfg.max_attempts,
            backoff_base_s=cfg.backoff_base_s,
            max_backoff_s=cfg.max_backoff_s,
            timeout_s=cfg.timeout_s,
        )

    raise ValueError(f"Unsupported AI_PROVIDER='{cfg.provider}'")
