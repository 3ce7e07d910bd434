import os
from dataclasses import dataclass


@dataclass(frozen=True)
class AIConfig:
    provider: str
    model: str
    api_key: str
    max_attempts: int
    backoff_base_s: float
    max_backoff_s: float
    timeout_s: float


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def load_ai_config() -> AIConfig:
    provider = os.getenv("AI_PROVIDER", "gemini").strip().lower()
    model = (os.getenv("GEMINI_MODEL") or os.getenv("AI_MODEL") or "gemini-1.5-flash").strip()
    api_key = (os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY") or "").strip()
    return AIConfig(
        provider=provider,
        model=model,
        api_key=api_key,
        max_attempts=max(1, _int_env("GEMINI_MAX_ATTEMPTS", 3)),
        backoff_base_s=max(0.0, _float_env("GEMINI_BACKOFF_BASE_S", 1.0)),
        max_backoff_s=max(0.0, _float_env("GEMINI_MAX_BACKOFF_S", 30.0)),
        timeout_s=max(1.0, _float_env("GEMINI_TIMEOUT_S", 60.0)),
    )
