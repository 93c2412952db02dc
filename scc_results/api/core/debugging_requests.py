"""
Debugging Requests
==================

Utilities for inspecting what the Results service sent back for a call.

The service echoes (or generates) an `X-Correlation-Id` header on every
response; quoting it is the fastest way to have a failing request traced on
the server side. Each operation returns a `DetailedResponse` next to its typed
result, and every error raised after a response was received carries one too.

This module exposes:

- DetailedResponse: status, headers, decoded result and raw body of a call
- extract_correlation_id(): read the correlation id from response headers
- make_correlation_id(): helper to generate X-Correlation-Id values
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional
import uuid

import httpx

CORRELATION_ID_HEADER = "X-Correlation-Id"


@dataclass
class DetailedResponse:
    """
    Everything known about a single completed HTTP exchange.

    Attributes:
        status_code:
            HTTP status of the final attempt.
        headers:
            Response headers (case-insensitive).
        result:
            Decoded typed result, a BinaryStream for download operations, or
            None when the body was empty or the status was not 2xx.
        raw_body:
            Body bytes as received, when they were read (never set for
            streamed downloads).
    """

    status_code: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    result: Any = None
    raw_body: Optional[bytes] = None

    @property
    def correlation_id(self) -> Optional[str]:
        return extract_correlation_id(self.headers)


def extract_correlation_id(headers: Mapping[str, str]) -> Optional[str]:
    """Return the correlation id from response headers, if present."""
    if isinstance(headers, httpx.Headers):
        return headers.get(CORRELATION_ID_HEADER)
    lower = {k.lower(): v for k, v in headers.items()}
    return lower.get(CORRELATION_ID_HEADER.lower())


def make_correlation_id() -> str:
    """
    Generate a value suitable for the X-Correlation-Id header.

    The service treats the value as opaque; a UUID4 keeps it unique per call.
    """
    return str(uuid.uuid4())


__all__ = [
    "CORRELATION_ID_HEADER",
    "DetailedResponse",
    "extract_correlation_id",
    "make_correlation_id",
]
