"""Shared JSON-over-HTTP helper for the metadata and rating providers."""

from __future__ import annotations

import logging
import time
from typing import Dict, Optional

import requests

from core.config import EXTERNAL_API_MAX_RETRIES, EXTERNAL_API_RETRY_BASE_DELAY_SECONDS

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class ProviderError(RuntimeError):
    """Raised when a provider answers with something other than a JSON object."""

    def __init__(self, source: str, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source
        self.status_code = status_code


def _retry_delay_seconds(attempt: int) -> float:
    base = max(EXTERNAL_API_RETRY_BASE_DELAY_SECONDS, 0.1)
    return base * (2 ** max(attempt - 1, 0))


def request_json_with_retry(
    url: str,
    *,
    params: Optional[Dict[str, object]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout_seconds: float,
    source: str,
    max_retries: Optional[int] = None,
    session: Optional[requests.Session] = None,
) -> Dict:
    """GET ``url`` and return the decoded JSON object.

    Connection errors, 429/5xx answers and undecodable bodies are retried with
    exponential backoff. Other non-2xx answers fail immediately.
    """
    http = session or requests
    attempts = max(max_retries if max_retries is not None else EXTERNAL_API_MAX_RETRIES, 1)
    last_error: Optional[Exception] = None

    for attempt in range(1, attempts + 1):
        try:
            response = http.get(url, params=params, headers=headers, timeout=timeout_seconds)
        except requests.RequestException as exc:
            last_error = exc
            if attempt < attempts:
                time.sleep(_retry_delay_seconds(attempt))
                continue
            raise

        if response.status_code in _RETRYABLE_STATUS_CODES:
            last_error = ProviderError(source, f"HTTP {response.status_code}", response.status_code)
            if attempt < attempts:
                logger.debug("%s HTTP %s, retrying (%s/%s)", source, response.status_code, attempt, attempts)
                time.sleep(_retry_delay_seconds(attempt))
                continue
            raise last_error

        if not 200 <= response.status_code < 300:
            raise ProviderError(source, f"HTTP {response.status_code}", response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            last_error = exc
            if attempt < attempts:
                time.sleep(_retry_delay_seconds(attempt))
                continue
            raise

        if isinstance(payload, dict):
            return payload
        raise ProviderError(source, "returned non-object JSON payload", response.status_code)

    if last_error:
        raise last_error
    raise ProviderError(source, "request failed")


__all__ = ["ProviderError", "request_json_with_retry"]
