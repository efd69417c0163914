"""Unit tests for the JSON request helper."""

from __future__ import annotations

import unittest
from typing import Any, List
from unittest.mock import patch

import requests

from core.http import ProviderError, request_json_with_retry


class _Response:
    def __init__(self, status_code: int, payload: Any = None, bad_json: bool = False) -> None:
        self.status_code = status_code
        self._payload = payload
        self._bad_json = bad_json

    def json(self) -> Any:
        if self._bad_json:
            raise ValueError("Expecting value")
        return self._payload


class _Session:
    def __init__(self, outcomes: List[Any]) -> None:
        self.outcomes = list(outcomes)
        self.calls = 0

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class RequestJsonWithRetryTests(unittest.TestCase):
    def test_retries_on_server_error_then_succeeds(self) -> None:
        session = _Session([_Response(503), _Response(200, {"ok": True})])
        with patch("core.http.time.sleep") as sleep:
            payload = request_json_with_retry(
                "https://x.test", timeout_seconds=1, source="test", max_retries=2, session=session
            )
        self.assertEqual(payload, {"ok": True})
        self.assertEqual(session.calls, 2)
        sleep.assert_called_once()

    def test_client_error_is_not_retried(self) -> None:
        session = _Session([_Response(401, {"status_message": "bad key"})])
        with self.assertRaises(ProviderError) as ctx:
            request_json_with_retry(
                "https://x.test", timeout_seconds=1, source="test", max_retries=3, session=session
            )
        self.assertEqual(ctx.exception.status_code, 401)
        self.assertEqual(session.calls, 1)

    def test_connection_error_propagates_after_retries(self) -> None:
        session = _Session([requests.ConnectionError("down"), requests.ConnectionError("down")])
        with patch("core.http.time.sleep"):
            with self.assertRaises(requests.ConnectionError):
                request_json_with_retry(
                    "https://x.test", timeout_seconds=1, source="test", max_retries=2, session=session
                )
        self.assertEqual(session.calls, 2)

    def test_non_object_payload_is_rejected(self) -> None:
        session = _Session([_Response(200, ["a", "b"])])
        with self.assertRaises(ProviderError):
            request_json_with_retry(
                "https://x.test", timeout_seconds=1, source="test", max_retries=1, session=session
            )

    def test_bad_json_raises_value_error(self) -> None:
        session = _Session([_Response(200, bad_json=True)])
        with self.assertRaises(ValueError):
            request_json_with_retry(
                "https://x.test", timeout_seconds=1, source="test", max_retries=1, session=session
            )


if __name__ == "__main__":
    unittest.main()
