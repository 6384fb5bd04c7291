import logging
import os
import time
from dataclasses import dataclass
from typing import Any

import httpx


_RETRYABLE_STATUS_CODES = frozenset({408, 425, 429, 500, 502, 503, 504})

_logger = logging.getLogger(__name__)


class CircuitOpenError(RuntimeError):
    pass


def _is_truthy(value: str | None, *, default: str) -> bool:
    normalized = str(value if value is not None else default).strip().lower()
    return normalized in {"1", "true", "yes"}


@dataclass
class _Breaker:
    failures: int = 0
    open_until: float = 0.0


class CircuitBreakerBoard:
    """Per-host failure counters shared by every catalogue client."""

    def __init__(self) -> None:
        self._breakers: dict[str, _Breaker] = {}

    @staticmethod
    def enabled() -> bool:
        return _is_truthy(os.getenv("ASTRALGATE_HTTP_CIRCUIT_BREAKER_ENABLED"), default="1")

    @staticmethod
    def failure_threshold() -> int:
        return max(1, int(os.getenv("ASTRALGATE_HTTP_CIRCUIT_FAILURE_THRESHOLD", "3")))

    @staticmethod
    def reset_seconds() -> float:
        return max(0.0, float(os.getenv("ASTRALGATE_HTTP_CIRCUIT_RESET_SECONDS", "120")))

    def check(self, key: str) -> None:
        if not self.enabled():
            return
        breaker = self._breakers.get(key)
        if breaker is None:
            return
        if breaker.open_until > time.time():
            raise CircuitOpenError(f"Circuit open for {key} until {int(breaker.open_until)}")
        if breaker.open_until > 0:
            self._breakers.pop(key, None)

    def succeeded(self, key: str) -> None:
        if self.enabled():
            self._breakers.pop(key, None)

    def failed(self, key: str) -> None:
        if not self.enabled():
            return
        breaker = self._breakers.setdefault(key, _Breaker())
        breaker.failures += 1
        if breaker.failures >= self.failure_threshold():
            breaker.open_until = time.time() + self.reset_seconds()
            _logger.warning("HTTP circuit opened", extra={"circuit": key, "failures": breaker.failures})

    def reset(self) -> None:
        self._breakers.clear()


BREAKERS = CircuitBreakerBoard()


def reset_circuit_breakers() -> None:
    BREAKERS.reset()


def _should_retry(exc: Exception) -> bool:
    if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in _RETRYABLE_STATUS_CODES
    return False


def get_json_with_retry(
    client: httpx.Client,
    path: str,
    *,
    params: dict[str, Any] | None = None,
    retries: int = 0,
    backoff_seconds: float = 0.2,
) -> dict[str, Any]:
    key = str(getattr(client, "base_url", "") or "unknown")
    attempts = max(0, int(retries)) + 1
    for attempt in range(attempts):
        try:
            BREAKERS.check(key)
            response = client.get(path, params=params, headers={"Accept": "application/json"})
            if response.status_code in _RETRYABLE_STATUS_CODES:
                raise httpx.HTTPStatusError(
                    f"Retryable HTTP status: {response.status_code}",
                    request=response.request,
                    response=response,
                )
            response.raise_for_status()
            payload = response.json()
            BREAKERS.succeeded(key)
        except Exception as exc:
            retryable = _should_retry(exc)
            if retryable:
                BREAKERS.failed(key)
            if not retryable or attempt >= attempts - 1:
                raise
            time.sleep(max(0.0, backoff_seconds) * (2**attempt))
            continue
        if not isinstance(payload, dict):
            raise ValueError(f"Expected a JSON object from {key}{path}")
        return payload
    return {}
