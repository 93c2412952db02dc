"""
HTTP client implementations for the Results client.

This module exposes a minimal interface `ResultsHTTPClient` used by the
service core and a concrete httpx-based adapter `HttpxResultsHTTPClient`.

Notes:
- `HttpxResultsHTTPClient` is a synchronous adapter using `httpx.Client`.
- Responses are always opened in streaming mode; the caller decides whether
  to read the body (JSON operations) or hand it out (downloads).
- httpx exceptions are translated here: timeouts that hit the caller's
  deadline become CanceledError, every other network failure TransportError.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

import httpx

from scc_results.api.core.context import DEADLINE_EXCEEDED, RequestContext
from scc_results.api.core.errors import CanceledError, TransportError
from scc_results.api.core.request_builder import Request

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0


class ResultsHTTPClient:
    """
    Minimal transport interface used by the service core.

    `send` performs exactly one HTTP exchange and returns the response with
    its body not yet read. It must honour the context's deadline and raise
    CanceledError / TransportError instead of library-specific exceptions.
    """

    def send(self, request: Request, context: RequestContext) -> httpx.Response:
        raise NotImplementedError("ResultsHTTPClient.send must be implemented by the runtime client")

    def close(self) -> None:
        return None


class HttpxResultsHTTPClient(ResultsHTTPClient):
    """
    Synchronous httpx-based implementation of ResultsHTTPClient.

    Example:
        http = HttpxResultsHTTPClient(timeout=30.0)
        response = http.send(request, RequestContext.with_timeout(5))
        http.close()

    An existing `httpx.Client` may be supplied, e.g. one built on
    `httpx.MockTransport` for tests or with custom proxies.
    """

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        *,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        verify: bool = True,
    ) -> None:
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=timeout, verify=verify)

    @property
    def client(self) -> httpx.Client:
        return self._client

    def _timeout_for(self, context: RequestContext) -> Tuple[Optional[float], bool]:
        """Effective timeout, and whether it is bounded by the deadline."""
        remaining = context.remaining()
        if remaining is None:
            return self._timeout, False
        if self._timeout is None or remaining <= self._timeout:
            return remaining, True
        return self._timeout, False

    def send(self, request: Request, context: RequestContext) -> httpx.Response:
        context.check()
        timeout, deadline_bound = self._timeout_for(context)
        http_request = self._client.build_request(
            request.method,
            request.url,
            headers=list(request.headers.multi_items()),
            content=request.body,
            timeout=timeout,
        )
        logger.debug(
            "Sending request",
            extra={"method": request.method, "url": request.url, "timeout": timeout},
        )
        try:
            response = self._client.send(http_request, stream=True)
        except httpx.TimeoutException as exc:
            if deadline_bound or context.expired():
                raise CanceledError(f"{DEADLINE_EXCEEDED}: {exc}", cause=exc) from exc
            raise TransportError(f"request timed out: {exc}", cause=exc) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"request failed: {exc}", cause=exc) from exc
        logger.debug(
            "Received response",
            extra={"method": request.method, "url": request.url, "status_code": response.status_code},
        )
        return response

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpxResultsHTTPClient":
        return self

    def __exit__(self, exc_type: Optional[type], exc: Optional[BaseException], tb: Optional[Any]) -> None:
        self.close()


__all__ = ["ResultsHTTPClient", "HttpxResultsHTTPClient", "DEFAULT_TIMEOUT"]
