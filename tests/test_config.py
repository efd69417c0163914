"""Unit tests for derived configuration values."""

from __future__ import annotations

import os
import unittest

from core import config
from core.config import request_budget_seconds


class RequestBudgetTests(unittest.TestCase):
    def test_single_attempt_is_the_request_timeout(self) -> None:
        self.assertEqual(request_budget_seconds(5.0, 1, 1.0), 5.0)

    def test_retries_add_timeouts_and_backoff(self) -> None:
        self.assertEqual(request_budget_seconds(8.0, 2, 1.0), 17.0)
        self.assertEqual(request_budget_seconds(5.0, 3, 0.5), 16.5)

    @unittest.skipIf(os.getenv("RATINGS_LOOKUP_TIMEOUT_SECONDS"), "lookup timeout set in environment")
    def test_default_lookup_timeout_covers_slowest_provider(self) -> None:
        slowest = max(config.TMDB_TIMEOUT_SECONDS, config.OMDB_TIMEOUT_SECONDS)
        self.assertGreaterEqual(
            config.RATINGS_LOOKUP_TIMEOUT_SECONDS,
            request_budget_seconds(
                slowest,
                config.EXTERNAL_API_MAX_RETRIES,
                config.EXTERNAL_API_RETRY_BASE_DELAY_SECONDS,
            ),
        )


if __name__ == "__main__":
    unittest.main()
