"""
Service core
============

`BaseService` owns a client's `ServiceOptions` and runs the request
pipeline shared by every operation:

    validate options → build request → merge headers → authenticate
        → send (with retries) → classify status → decode

Header precedence, lowest to highest: default headers, SDK identification
headers, per-call headers. `Accept` and `X-Correlation-Id` are applied last.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
import threading
from typing import Any, Mapping, Optional, Tuple

import httpx

from scc_results.api.core.authentication import Authenticator
from scc_results.api.core.codec import BinaryStream, decode_json, iter_body, parse_json
from scc_results.api.core.config import EnvironmentConfigProvider, parse_bool, parse_int
from scc_results.api.core.context import RequestContext
from scc_results.api.core.debugging_requests import (
    CORRELATION_ID_HEADER,
    DetailedResponse,
    extract_correlation_id,
)
from scc_results.api.core.endpoints import validate_service_url
from scc_results.api.core.errors import (
    AuthError,
    ConfigError,
    DecodeError,
    ServiceError,
)
from scc_results.api.core.operations import OperationSpec, query_values, validate_options
from scc_results.api.core.request_builder import Request, RequestBuilder
from scc_results.api.core.retries import RetryingHTTPClient, RetryPolicy
from scc_results.api.core.sdk_headers import get_sdk_headers
from scc_results.http_client import HttpxResultsHTTPClient, ResultsHTTPClient

logger = logging.getLogger(__name__)

ERROR_BODY_LIMIT = 64 * 1024


@dataclass
class ServiceOptions:
    """Per-client configuration. Mutated only through BaseService setters."""

    url: str
    authenticator: Authenticator
    default_headers: httpx.Headers = field(default_factory=httpx.Headers)
    enable_gzip: bool = False
    retry_policy: Optional[RetryPolicy] = None
    disable_ssl_verification: bool = False

    def copy(self) -> "ServiceOptions":
        return replace(self, default_headers=httpx.Headers(list(self.default_headers.multi_items())))


def _error_message(error_body: Any, response: httpx.Response) -> str:
    if isinstance(error_body, Mapping):
        errors = error_body.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], Mapping):
            message = errors[0].get("message")
            if message:
                return str(message)
        for key in ("error", "message", "errorMessage"):
            value = error_body.get(key)
            if isinstance(value, str) and value:
                return value
    return response.reason_phrase or f"HTTP {response.status_code}"


class _TransportLease:
    """Counts the services sharing an owned transport; the last release closes it."""

    def __init__(self, http_client: ResultsHTTPClient) -> None:
        self.http_client = http_client
        self.holders = 1
        self._lock = threading.Lock()

    def acquire(self) -> "_TransportLease":
        with self._lock:
            self.holders += 1
        return self

    def release(self) -> None:
        with self._lock:
            self.holders -= 1
            last = self.holders == 0
        if last:
            self.http_client.close()


class BaseService:
    """Request pipeline and configuration shared by all operations."""

    def __init__(
        self,
        options: ServiceOptions,
        *,
        service_name: str,
        service_version: str,
        http_client: Optional[ResultsHTTPClient] = None,
    ) -> None:
        if options.authenticator is None:
            raise ConfigError("authenticator must not be None")
        options.authenticator.validate()
        validate_service_url(options.url)
        self.options = options
        self.service_name = service_name
        self.service_version = service_version
        self.http_client: ResultsHTTPClient
        self._lease: Optional[_TransportLease] = None
        if http_client is None:
            self._use_owned_http_client(options.disable_ssl_verification)
        else:
            self.http_client = http_client

    # Transport ownership ------------------------------------------------------

    def _use_owned_http_client(self, disable_ssl: bool) -> None:
        self.http_client = HttpxResultsHTTPClient(verify=not disable_ssl)
        self._lease = _TransportLease(self.http_client)

    def _release_http_client(self) -> None:
        if self._lease is not None:
            self._lease.release()
            self._lease = None

    # Configuration ------------------------------------------------------------

    def set_service_url(self, url: str) -> None:
        validate_service_url(url)
        self.options.url = url

    def get_service_url(self) -> str:
        return self.options.url

    def set_default_headers(self, headers: Mapping[str, str]) -> None:
        self.options.default_headers = httpx.Headers(dict(headers or {}))

    def set_enable_gzip_compression(self, enable: bool) -> None:
        self.options.enable_gzip = bool(enable)

    def get_enable_gzip_compression(self) -> bool:
        return self.options.enable_gzip

    def enable_retries(self, max_retries: int = 0, max_retry_interval: float = 0) -> None:
        self.options.retry_policy = RetryPolicy.with_defaults(max_retries, max_retry_interval)

    def disable_retries(self) -> None:
        self.options.retry_policy = None

    def set_disable_ssl_verification(self, disable: bool) -> None:
        """
        Rebuild the owned transport with the new verification setting.

        A clone gets a transport of its own; the one it shared is closed
        once its last user lets go of it.

        Raises:
            ConfigError: the transport was supplied by the caller.
        """
        if self._lease is None:
            raise ConfigError("cannot change SSL verification of a caller-supplied HTTP client")
        self._release_http_client()
        self._use_owned_http_client(bool(disable))
        self.options.disable_ssl_verification = bool(disable)

    def set_http_client(self, http_client: ResultsHTTPClient) -> None:
        self._release_http_client()
        self.http_client = http_client

    def configure_service(self, service_name: str, config_provider: EnvironmentConfigProvider) -> None:
        """Apply URL, SSL, gzip and retry settings from external configuration."""
        props = config_provider.get_service_properties(service_name)
        if "URL" in props:
            self.set_service_url(props["URL"])
        disable_ssl = parse_bool(props.get("DISABLE_SSL"), "DISABLE_SSL")
        if disable_ssl is not None:
            self.set_disable_ssl_verification(disable_ssl)
        enable_gzip = parse_bool(props.get("ENABLE_GZIP"), "ENABLE_GZIP")
        if enable_gzip is not None:
            self.set_enable_gzip_compression(enable_gzip)
        if parse_bool(props.get("ENABLE_RETRIES"), "ENABLE_RETRIES"):
            self.enable_retries(
                parse_int(props.get("MAX_RETRIES"), "MAX_RETRIES") or 0,
                parse_int(props.get("RETRY_INTERVAL"), "RETRY_INTERVAL") or 0,
            )

    def clone(self) -> "BaseService":
        """Copy with independent options, sharing authenticator and transport."""
        clone = BaseService.__new__(BaseService)
        clone.__dict__.update(self.__dict__)
        clone.options = self.options.copy()
        if self._lease is not None:
            clone._lease = self._lease.acquire()
        return clone

    def close(self) -> None:
        self._release_http_client()

    # Pipeline -----------------------------------------------------------------

    def _transport(self) -> ResultsHTTPClient:
        policy = self.options.retry_policy
        if policy is None or policy.max_retries <= 0:
            return self.http_client
        return RetryingHTTPClient(self.http_client, policy)

    def build_request(self, spec: OperationSpec, options: Any) -> Request:
        path_values = validate_options(spec, options)

        builder = RequestBuilder(spec.method)
        builder.enable_gzip_compression = self.options.enable_gzip
        builder.resolve_url(self.options.url, spec.path, path_values)

        for name, value in self.options.default_headers.multi_items():
            builder.add_header(name, value)
        sdk_headers = get_sdk_headers(self.service_name, self.service_version, spec.operation_id)
        for name, value in sdk_headers.items():
            builder.set_header(name, value)
        for name, value in (getattr(options, "headers", None) or {}).items():
            builder.set_header(name, value)
        builder.set_header("Accept", spec.accept)
        correlation_id = getattr(options, "x_correlation_id", None)
        if correlation_id is not None:
            builder.set_header(CORRELATION_ID_HEADER, str(correlation_id))

        for name, value in query_values(spec, options):
            builder.add_query(name, value)
        return builder.build()

    def invoke(
        self,
        spec: OperationSpec,
        options: Any,
        context: Optional[RequestContext] = None,
    ) -> Tuple[Any, DetailedResponse]:
        """Run one operation and return (result, detailed response)."""
        request = self.build_request(spec, options)
        logger.debug("Invoking operation", extra={"operation_id": spec.operation_id, "url": request.url})
        return self.request(request, context, decoder=spec.decoder)

    def request(
        self,
        request: Request,
        context: Optional[RequestContext] = None,
        *,
        decoder: Any = None,
    ) -> Tuple[Any, DetailedResponse]:
        context = context or RequestContext.background()
        context.check()

        try:
            self.options.authenticator.authenticate(request)
        except AuthError:
            raise
        except Exception as exc:
            raise AuthError(f"authentication failed: {exc}") from exc

        response = self._transport().send(request, context)

        if not response.is_success:
            raise self._service_error(response, context)

        if decoder is None:
            return self._stream_result(response, context)

        body = self._read(response, context)
        detailed = DetailedResponse(
            status_code=response.status_code,
            headers=response.headers,
            raw_body=body,
        )
        try:
            detailed.result = decode_json(body, decoder)
        except DecodeError as exc:
            exc.response = detailed
            logger.debug("Failed to decode response", extra={"url": request.url, "path": exc.path})
            raise
        return detailed.result, detailed

    # Response handling --------------------------------------------------------

    @staticmethod
    def _stream_result(response: httpx.Response, context: RequestContext) -> Tuple[Any, DetailedResponse]:
        detailed = DetailedResponse(status_code=response.status_code, headers=response.headers)
        if response.headers.get("Content-Length") == "0":
            response.close()
            return None, detailed
        detailed.result = BinaryStream(response, context=context)
        return detailed.result, detailed

    @staticmethod
    def _read(response: httpx.Response, context: RequestContext, limit: Optional[int] = None) -> bytes:
        chunks = []
        size = 0
        try:
            for chunk in iter_body(response, context):
                chunks.append(chunk)
                size += len(chunk)
                if limit is not None and size >= limit:
                    break
        finally:
            response.close()
        body = b"".join(chunks)
        return body[:limit] if limit is not None else body

    def _service_error(self, response: httpx.Response, context: RequestContext) -> ServiceError:
        body = self._read(response, context, limit=ERROR_BODY_LIMIT)
        error_body: Any = None
        if body:
            try:
                error_body = parse_json(body)
            except DecodeError:
                error_body = body.decode("utf-8", errors="replace")
        detailed = DetailedResponse(
            status_code=response.status_code,
            headers=response.headers,
            raw_body=body,
        )
        message = _error_message(error_body, response)
        logger.debug(
            "Service returned an error",
            extra={"status_code": response.status_code, "error_message": message},
        )
        return ServiceError(
            message,
            status_code=response.status_code,
            correlation_id=extract_correlation_id(response.headers),
            error_body=error_body,
            response=detailed,
        )


__all__ = [
    "BaseService",
    "ServiceOptions",
]
