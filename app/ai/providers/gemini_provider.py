from __future__ import annotations

import logging
import re
import time
from typing import Any, Callable

from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from app.ai.types import GenerationError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 503})

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*s?\s*$")


def _looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return lower.startswith("your_") or lower.startswith("replace_") or lower in {"changeme", "todo"}


def is_retryable_error(exc: BaseException) -> bool:
    return isinstance(exc, genai_errors.APIError) and exc.code in RETRYABLE_STATUS_CODES


def retry_hint_seconds(exc: BaseException | None) -> float | None:
    """Return the server-provided ``RetryInfo.retryDelay`` of an API error, in seconds."""
    if exc is None:
        return None
    payload: Any = getattr(exc, "details", None)
    if isinstance(payload, dict):
        body = payload["error"] if isinstance(payload.get("error"), dict) else payload
        payload = body.get("details")
    if not isinstance(payload, list):
        return None
    for item in payload:
        if not isinstance(item, dict):
            continue
        raw = item.get("retryDelay")
        if raw is None:
            continue
        if isinstance(raw, (int, float)):
            return max(0.0, float(raw))
        match = _DURATION_RE.match(str(raw))
        if match:
            return float(match.group(1))
    return None


def wait_with_retry_hint(base_s: float, max_s: float) -> Callable[[Any], float]:
    exponential = wait_exponential(multiplier=base_s, max=max_s)

    def _wait(retry_state: Any) -> float:
        outcome = retry_state.outcome
        hint = retry_hint_seconds(outcome.exception() if outcome is not None else None)
        if hint is not None:
            return min(hint, max_s)
        return exponential(retry_state)

    return _wait


class GeminiProvider:
    def __init__(
        self,
        model: str,
        api_key: str | None = None,
        max_attempts: int = 3,
        backoff_base_s: float = 1.0,
        max_backoff_s: float = 30.0,
        timeout_s: float = 60.0,
        client: Any | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._model = model
        self._api_key = (api_key or "").strip()
        self._max_attempts = max(1, int(max_attempts))
        self._backoff_base_s = backoff_base_s
        self._max_backoff_s = max_backoff_s
        self._timeout_s = timeout_s
        self._client = client
        self._sleep = sleep

    @property
    def model(self) -> str:
        return self._model

    def configured(self) -> bool:
        if self._client is not None:
            return True
        return bool(self._api_key) and not _looks_like_placeholder(self._api_key)

    def _get_client(self) -> Any:
        if self._client is None:
            if not self.configured():
                raise GenerationError("GOOGLE_API_KEY is missing", code="not_configured")
            self._client = genai.Client(
                api_key=self._api_key,
                http_options=genai_types.HttpOptions(timeout=int(self._timeout_s * 1000)),
            )
        return self._client

    def _generate_once(self, prompt: str) -> str:
        response = self._get_client().models.generate_content(model=self._model, contents=prompt)
        return getattr(response, "text", None) or ""

    def generate(self, prompt: str) -> str:
        retryer = Retrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_with_retry_hint(self._backoff_base_s, self._max_backoff_s),
            retry=retry_if_exception(is_retryable_error),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=self._sleep,
            reraise=True,
        )
        try:
            text = retryer(self._generate_once, prompt)
        except GenerationError:
            raise
        except genai_errors.APIError as exc:
            code = "rate_limited" if exc.code == 429 else "unavailable" if exc.code == 503 else "api_error"
            logger.warning("gemini_generate_failed model=%s status=%s: %s", self._model, exc.code, exc)
            raise GenerationError(str(exc), code=code, status_code=exc.code) from exc
        except Exception as exc:  # noqa: BLE001 - surfaced to the caller as a generation failure
            logger.warning("gemini_generate_failed model=%s: %s", self._model, exc)
            raise GenerationError(str(exc)) from exc

        text = text.strip()
        if not text:
            raise GenerationError("Model returned an empty response.", code="empty_response")
        return text
