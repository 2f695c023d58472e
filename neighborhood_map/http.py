"""HTTP client with retry/backoff and request budgeting."""
from __future__ import annotations

import logging
import random
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

REQUEST_KINDS = ("places", "venues", "photos", "geocode")


class BudgetExceededError(RuntimeError):
    pass


def _check_kind(kind: str) -> None:
    if kind not in REQUEST_KINDS:
        raise ValueError(f"Unknown request kind: {kind}")


@dataclass
class RequestMetrics:
    network_places: int = 0
    network_venues: int = 0
    network_photos: int = 0
    network_geocode: int = 0
    failures_places: int = 0
    failures_venues: int = 0
    failures_photos: int = 0
    failures_geocode: int = 0

    def network_count(self, kind: str) -> int:
        _check_kind(kind)
        return int(getattr(self, f"network_{kind}"))

    def failure_count(self, kind: str) -> int:
        _check_kind(kind)
        return int(getattr(self, f"failures_{kind}"))

    def inc_network(self, kind: str) -> None:
        _check_kind(kind)
        setattr(self, f"network_{kind}", self.network_count(kind) + 1)

    def inc_failure(self, kind: str) -> None:
        _check_kind(kind)
        setattr(self, f"failures_{kind}", self.failure_count(kind) + 1)


class RequestBudget:
    """Per-session request caps, shared by clients running in worker threads."""

    def __init__(
        self,
        limits: Dict[str, int],
        metrics: Optional[RequestMetrics] = None,
    ) -> None:
        for kind in limits:
            _check_kind(kind)
        self.limits = dict(limits)
        self.metrics = metrics if metrics is not None else RequestMetrics()
        self._lock = threading.Lock()

    def count(self, kind: str) -> int:
        return self.metrics.network_count(kind)

    def remaining(self, kind: str) -> Optional[int]:
        limit = self.limits.get(kind)
        if limit is None:
            return None
        return max(0, limit - self.count(kind))

    def consume(self, kind: str) -> None:
        _check_kind(kind)
        limit = self.limits.get(kind)
        with self._lock:
            used = self.count(kind)
            if limit is not None and used >= limit:
                raise BudgetExceededError(
                    f"{kind.capitalize()} request budget exceeded: {used} >= {limit}"
                )
            self.metrics.inc_network(kind)


class HttpClient:
    def __init__(
        self,
        timeout: int = 20,
        retry_max: int = 5,
        backoff_base: float = 0.5,
        backoff_max: float = 8.0,
    ) -> None:
        self.timeout = timeout
        self.retry_max = retry_max
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max
        self.session = requests.Session()

    def get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        extra_headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        headers = {"Accept": "application/json"}
        if extra_headers:
            headers.update(extra_headers)

        for attempt in range(1, self.retry_max + 1):
            try:
                resp = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
            except requests.RequestException:
                if attempt >= self.retry_max:
                    raise
                self._sleep_backoff(attempt)
                continue

            status = resp.status_code
            if status == 200:
                try:
                    return resp.json()
                except ValueError:
                    logger.error("Non-JSON response from %s", url)
                    raise

            if status in (429, 500, 502, 503, 504):
                logger.warning("HTTP %s from %s (attempt %s)", status, url, attempt)
                if attempt >= self.retry_max:
                    resp.raise_for_status()
                if not self._sleep_retry_after(resp):
                    self._sleep_backoff(attempt)
                continue

            # Non-retryable
            logger.error("HTTP %s from %s", status, url)
            resp.raise_for_status()

        raise RuntimeError("Unexpected HTTP retry loop exit")

    def _sleep_backoff(self, attempt: int) -> None:
        base = min(self.backoff_base * (2 ** (attempt - 1)), self.backoff_max)
        jitter = random.uniform(0, self.backoff_base)
        time.sleep(base + jitter)

    def _sleep_retry_after(self, resp: requests.Response) -> bool:
        retry_after = resp.headers.get("Retry-After")
        if not retry_after:
            return False
        try:
            delay = float(retry_after)
        except ValueError:
            return False
        delay = max(0.0, min(delay, self.backoff_max))
        time.sleep(delay)
        return True
