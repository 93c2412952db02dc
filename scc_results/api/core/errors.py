"""
Errors
======

Exception hierarchy raised by every operation of the Results client.

    ResultsError
    ├── ValidationError   caller passed a bad option bundle; nothing was sent
    ├── ConfigError       bad URL, unknown URL variable, missing configuration
    ├── AuthError         the authenticator could not sign the request
    ├── TransportError    network / TLS failure
    ├── ServiceError      non-2xx HTTP response
    ├── DecodeError       response body could not be decoded
    ├── CanceledError     caller cancelled or the deadline expired
    └── StateError        pager misuse

Every error may carry the DetailedResponse of the call that produced it so
status code and correlation id stay reachable after a failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from scc_results.api.core.debugging_requests import DetailedResponse


class ResultsError(Exception):
    """Base exception for all library errors."""

    def __init__(self, message: str, *, response: Optional["DetailedResponse"] = None) -> None:
        super().__init__(message)
        self.message = message
        self.response = response


class ValidationError(ResultsError, ValueError):
    """Option bundle missing or a required path parameter is empty."""


class ConfigError(ResultsError):
    """Invalid client configuration."""


class AuthError(ResultsError):
    """The authenticator rejected the request or could not obtain credentials."""


class TransportError(ResultsError):
    """Network-level failure talking to the service."""

    def __init__(
        self,
        message: str,
        *,
        cause: Optional[BaseException] = None,
        response: Optional["DetailedResponse"] = None,
    ) -> None:
        super().__init__(message, response=response)
        self.cause = cause


class ServiceError(ResultsError):
    """
    The service answered with a non-2xx status.

    Attributes:
        status_code: HTTP status of the final attempt.
        correlation_id: X-Correlation-Id echoed by the service, if any.
        error_body: decoded error envelope (or raw text when not JSON).
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        correlation_id: Optional[str] = None,
        error_body: Any = None,
        response: Optional["DetailedResponse"] = None,
    ) -> None:
        super().__init__(message, response=response)
        self.status_code = status_code
        self.correlation_id = correlation_id
        self.error_body = error_body

    @property
    def retryable(self) -> bool:
        return is_retryable_status(self.status_code)

    def __str__(self) -> str:
        return f"{self.status_code}: {self.message}"


class DecodeError(ResultsError):
    """
    Response body is not valid JSON, or a value has the wrong type.

    `path` is the dotted location of the failure inside the document
    (e.g. ``reports[0].account.id``); `body_excerpt` holds at most the first
    256 bytes of the offending body.
    """

    def __init__(
        self,
        message: str,
        *,
        path: str = "",
        body_excerpt: bytes = b"",
        response: Optional["DetailedResponse"] = None,
    ) -> None:
        super().__init__(message, response=response)
        self.path = path
        self.body_excerpt = body_excerpt

    def prefixed(self, segment: str) -> "DecodeError":
        """Return a copy whose path is nested under `segment`."""
        if not self.path:
            path = segment
        elif self.path.startswith("["):
            path = f"{segment}{self.path}"
        else:
            path = f"{segment}.{self.path}"
        return DecodeError(
            self.message,
            path=path,
            body_excerpt=self.body_excerpt,
            response=self.response,
        )

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} (at {self.path})"
        return self.message


class CanceledError(ResultsError):
    """The request context was cancelled or its deadline passed."""

    def __init__(
        self,
        message: str,
        *,
        cause: Optional[BaseException] = None,
        response: Optional["DetailedResponse"] = None,
    ) -> None:
        super().__init__(message, response=response)
        self.cause = cause


class StateError(ResultsError):
    """A pager was used in a way its state does not allow."""


def is_retryable_status(status_code: int) -> bool:
    """429 and every 5xx except 501 Not Implemented."""
    if status_code == 429:
        return True
    return 500 <= status_code < 600 and status_code != 501


__all__ = [
    "ResultsError",
    "ValidationError",
    "ConfigError",
    "AuthError",
    "TransportError",
    "ServiceError",
    "DecodeError",
    "CanceledError",
    "StateError",
    "is_retryable_status",
]
