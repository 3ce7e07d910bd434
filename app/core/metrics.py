from __future__ import annotations

import logging
import threading
from collections import Counter

logger = logging.getLogger(__name__)


class MetricsCollector:
    """Per-process counters for the analysis pipeline.

    Model calls are compared against ``quota_warning_threshold`` so operators
    see a warning before the hosted model's free-tier quota runs out.
    """

    def __init__(self, quota_warning_threshold: int = 1500):
        self.quota_warning_threshold = max(1, quota_warning_threshold)
        self._counts: Counter[str] = Counter()
        self._lock = threading.Lock()

    def increment(self, name: str, amount: int = 1) -> int:
        with self._lock:
            self._counts[name] += amount
            return self._counts[name]

    def record_request(self) -> int:
        return self.increment("requests")

    def record_model_call(self) -> int:
        calls = self.increment("model_calls")
        if calls >= self.quota_warning_threshold:
            logger.warning(
                "model_quota_warning calls=%s threshold=%s",
                calls,
                self.quota_warning_threshold,
            )
        elif calls >= int(self.quota_warning_threshold * 0.8):
            logger.info("model_quota_approaching calls=%s threshold=%s", calls, self.quota_warning_threshold)
        return calls

    def get(self, name: str) -> int:
        with self._lock:
            return self._counts[name]

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return dict(self._counts)

    def reset(self) -> None:
        with self._lock:
            self._counts.clear()
