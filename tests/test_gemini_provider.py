import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from google.genai import errors as genai_errors

from app.ai.config import AIConfig
from app.ai.factory import get_ai_client
from app.ai.providers.gemini_provider import GeminiProvider, retry_hint_seconds
from app.ai.types import GenerationError


def _api_error(code: int, retry_delay: str | None = None) -> genai_errors.APIError:
    details = []
    if retry_delay is not None:
        details.append({"@type": "type.googleapis.com/google.rpc.RetryInfo", "retryDelay": retry_delay})
    status = {429: "RESOURCE_EXHAUSTED", 503: "UNAVAILABLE", 400: "INVALID_ARGUMENT"}.get(code, "UNKNOWN")
    body = {"error": {"code": code, "message": "upstream said no", "status": status, "details": details}}
    error_cls = genai_errors.ClientError if code < 500 else genai_errors.ServerError
    return error_cls(code, body)


def _provider(*outcomes, max_attempts=3):
    client = MagicMock()
    client.models.generate_content.side_effect = list(outcomes)
    sleeps: list[float] = []
    provider = GeminiProvider(
        model="gemini-test",
        api_key="test-key",
        max_attempts=max_attempts,
        backoff_base_s=1.0,
        max_backoff_s=30.0,
        client=client,
        sleep=sleeps.append,
    )
    return provider, client, sleeps


class GeminiProviderRetryTests(unittest.TestCase):
    def test_returns_text_on_first_success(self):
        provider, client, sleeps = _provider(SimpleNamespace(text="  Data Scientist \n"))
        self.assertEqual(provider.generate("prompt"), "Data Scientist")
        client.models.generate_content.assert_called_once_with(model="gemini-test", contents="prompt")
        self.assertEqual(sleeps, [])

    def test_retries_rate_limit_then_succeeds(self):
        provider, client, sleeps = _provider(_api_error(429), _api_error(503), SimpleNamespace(text="ok"))
        self.assertEqual(provider.generate("prompt"), "ok")
        self.assertEqual(client.models.generate_content.call_count, 3)
        self.assertEqual(sleeps, [1.0, 2.0])

    def test_server_retry_hint_is_honoured(self):
        provider, _client, sleeps = _provider(_api_error(429, retry_delay="7s"), SimpleNamespace(text="ok"))
        provider.generate("prompt")
        self.assertEqual(sleeps, [7.0])

    def test_gives_up_after_fixed_attempts(self):
        provider, client, sleeps = _provider(*[_api_error(503)] * 3)
        with self.assertRaises(GenerationError) as ctx:
            provider.generate("prompt")
        self.assertEqual(ctx.exception.code, "unavailable")
        self.assertEqual(ctx.exception.status_code, 503)
        self.assertEqual(client.models.generate_content.call_count, 3)
        self.assertEqual(len(sleeps), 2)

    def test_other_errors_are_not_retried(self):
        provider, client, sleeps = _provider(_api_error(400), SimpleNamespace(text="never"))
        with self.assertRaises(GenerationError) as ctx:
            provider.generate("prompt")
        self.assertEqual(ctx.exception.code, "api_error")
        self.assertEqual(client.models.generate_content.call_count, 1)
        self.assertEqual(sleeps, [])

    def test_unexpected_exception_is_wrapped_without_retry(self):
        provider, client, _sleeps = _provider(ConnectionError("socket closed"))
        with self.assertRaises(GenerationError):
            provider.generate("prompt")
        self.assertEqual(client.models.generate_content.call_count, 1)

    def test_empty_reply_is_an_error(self):
        provider, _client, _sleeps = _provider(SimpleNamespace(text=""))
        with self.assertRaises(GenerationError) as ctx:
            provider.generate("prompt")
        self.assertEqual(ctx.exception.code, "empty_response")

    def test_missing_api_key_is_reported_without_network(self):
        provider = GeminiProvider(model="gemini-test", api_key="")
        self.assertFalse(provider.configured())
        with patch("app.ai.providers.gemini_provider.genai.Client") as client_cls:
            with self.assertRaises(GenerationError) as ctx:
                provider.generate("prompt")
        self.assertEqual(ctx.exception.code, "not_configured")
        client_cls.assert_not_called()


class RetryHintTests(unittest.TestCase):
    def test_reads_hint_from_error_body(self):
        self.assertEqual(retry_hint_seconds(_api_error(429, retry_delay="12.5s")), 12.5)

    def test_no_hint(self):
        self.assertIsNone(retry_hint_seconds(_api_error(429)))
        self.assertIsNone(retry_hint_seconds(ValueError("plain")))
        self.assertIsNone(retry_hint_seconds(None))


class FactoryTests(unittest.TestCase):
    def _config(self, provider: str) -> AIConfig:
        return AIConfig(
            provider=provider,
            model="gemini-test",
            api_key="k",
            max_attempts=2,
            backoff_base_s=0.5,
            max_backoff_s=4.0,
            timeout_s=10.0,
        )

    def test_gemini_provider_is_built(self):
        client = get_ai_client(self._config("gemini"))
        self.assertIsInstance(client, GeminiProvider)
        self.assertEqual(client.model, "gemini-test")

    def test_unknown_provider_is_rejected(self):
        with self.assertRaises(ValueError):
            get_ai_client(self._config("openai"))


if __name__ == "__main__":
    unittest.main()
