"""
Retries
=======

Automatic retry of failed requests, implemented as a transport wrapper so
operations never see it:

    http = RetryingHTTPClient(HttpxResultsHTTPClient(), RetryPolicy(max_retries=4))

An attempt is retried when it failed with a network error (connection
refused/reset, DNS, broken stream) or the service answered 429 or any 5xx
other than 501. Between attempts the wrapper waits with exponential backoff
capped at `max_interval`; a numeric `Retry-After` header on the response is
honoured within the same cap. Waits go through the request context, so they
end immediately on cancellation and never outlast the deadline.

When attempts run out the last outcome is returned unchanged: the final
error response for the service core to classify, or the final
TransportError.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional

import httpx

from scc_results.api.core.context import RequestContext
from scc_results.api.core.errors import TransportError, is_retryable_status
from scc_results.api.core.request_builder import Request
from scc_results.http_client import ResultsHTTPClient

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 4
DEFAULT_MAX_INTERVAL = 30.0
DEFAULT_INITIAL_INTERVAL = 1.0


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration with capped exponential backoff."""

    max_retries: int = DEFAULT_MAX_RETRIES
    max_interval: float = DEFAULT_MAX_INTERVAL
    initial_interval: float = DEFAULT_INITIAL_INTERVAL

    @classmethod
    def with_defaults(cls, max_retries: int = 0, max_interval: float = 0) -> "RetryPolicy":
        """Zero (or negative) for either argument selects the library default."""
        return cls(
            max_retries=max_retries if max_retries > 0 else DEFAULT_MAX_RETRIES,
            max_interval=float(max_interval) if max_interval > 0 else DEFAULT_MAX_INTERVAL,
        )

    def compute_backoff(self, attempt: int, *, retry_after: Optional[float] = None) -> float:
        """Delay before retry number `attempt` (1-based)."""
        if retry_after is not None:
            return max(0.0, min(retry_after, self.max_interval))
        delay = self.initial_interval * (2 ** max(0, attempt - 1))
        return min(delay, self.max_interval)


def parse_retry_after(response: httpx.Response) -> Optional[float]:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class RetryingHTTPClient(ResultsHTTPClient):
    """ResultsHTTPClient wrapper that re-sends retryable failures."""

    def __init__(self, inner: ResultsHTTPClient, policy: RetryPolicy) -> None:
        self.inner = inner
        self.policy = policy

    def send(self, request: Request, context: RequestContext) -> httpx.Response:
        attempt = 0
        while True:
            try:
                response = self.inner.send(request, context)
            except TransportError as exc:
                if attempt >= self.policy.max_retries:
                    raise
                attempt += 1
                delay = self.policy.compute_backoff(attempt)
                logger.warning(
                    "Retrying request after transport error",
                    extra={"url": request.url, "attempt": attempt, "delay": delay, "error": str(exc)},
                )
                context.wait(delay)
                continue

            if not is_retryable_status(response.status_code) or attempt >= self.policy.max_retries:
                return response

            attempt += 1
            delay = self.policy.compute_backoff(attempt, retry_after=parse_retry_after(response))
            logger.warning(
                "Retrying request after retryable status",
                extra={
                    "url": request.url,
                    "attempt": attempt,
                    "delay": delay,
                    "status_code": response.status_code,
                },
            )
            response.close()
            context.wait(delay)

    def close(self) -> None:
        self.inner.close()


__all__ = [
    "DEFAULT_INITIAL_INTERVAL",
    "DEFAULT_MAX_INTERVAL",
    "DEFAULT_MAX_RETRIES",
    "RetryPolicy",
    "RetryingHTTPClient",
    "parse_retry_after",
]
