import unittest

from app.core.metrics import MetricsCollector


class MetricsCollectorTests(unittest.TestCase):
    def test_counters_are_independent_per_instance(self):
        first = MetricsCollector()
        second = MetricsCollector()
        first.record_request()
        first.record_request()
        self.assertEqual(first.get("requests"), 2)
        self.assertEqual(second.get("requests"), 0)

    def test_quota_warning_logged_at_threshold(self):
        metrics = MetricsCollector(quota_warning_threshold=3)
        metrics.record_model_call()
        metrics.record_model_call()
        with self.assertLogs("app.core.metrics", level="WARNING") as logs:
            metrics.record_model_call()
        self.assertIn("model_quota_warning calls=3", logs.output[0])

    def test_snapshot_and_reset(self):
        metrics = MetricsCollector()
        metrics.increment("fallbacks", 2)
        self.assertEqual(metrics.snapshot(), {"fallbacks": 2})
        metrics.reset()
        self.assertEqual(metrics.snapshot(), {})


if __name__ == "__main__":
    unittest.main()
