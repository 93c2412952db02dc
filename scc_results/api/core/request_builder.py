"""
Request builder
===============

Composes a `Request` from a method, a base URL, a path template with
`{name}` placeholders, ordered query parameters, headers and an optional
body.

    builder = RequestBuilder("GET")
    builder.resolve_url(base_url, "/reports/{report_id}", {"report_id": "r1"})
    builder.add_query("limit", 10)
    request = builder.build()

Query parameters are emitted in the order they were added, so the built URL
is deterministic. Path parameter values are percent-encoded, including `/`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import gzip
import re
from typing import Any, List, Mapping, Optional, Tuple
from urllib.parse import quote, urlencode

import httpx

from scc_results.api.core.codec import encode_json
from scc_results.api.core.errors import ConfigError

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")

GET = "GET"
POST = "POST"


@dataclass
class Request:
    """A fully built HTTP request, ready to be signed and sent."""

    method: str
    url: str
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    query: List[Tuple[str, str]] = field(default_factory=list)
    body: Optional[bytes] = None
    accept: Optional[str] = None


def format_query_value(value: Any) -> str:
    """Render a query value the way the service expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class RequestBuilder:
    """Mutable builder for a single `Request`."""

    def __init__(self, method: str) -> None:
        self.method = method.upper()
        self.url = ""
        self._header_items: List[Tuple[str, str]] = []
        self.query: List[Tuple[str, str]] = []
        self.body: Optional[bytes] = None
        self.enable_gzip_compression = False

    def resolve_url(
        self,
        service_url: str,
        path: str,
        path_params: Optional[Mapping[str, str]] = None,
    ) -> str:
        """
        Join `path` onto `service_url`, substituting path parameters.

        Raises:
            ConfigError: the service URL is empty, or a placeholder has no
                value.
        """
        if not service_url:
            raise ConfigError("service URL is empty")
        params = path_params or {}

        def _sub(match: "re.Match[str]") -> str:
            name = match.group(1)
            value = params.get(name)
            if value is None:
                raise ConfigError(f"missing path parameter {name}")
            return quote(str(value), safe="")

        resolved = _PLACEHOLDER.sub(_sub, path)
        if resolved and not resolved.startswith("/"):
            resolved = "/" + resolved
        self.url = service_url.rstrip("/") + resolved
        return self.url

    def add_query(self, name: str, value: Any) -> "RequestBuilder":
        self.query.append((name, format_query_value(value)))
        return self

    @property
    def headers(self) -> httpx.Headers:
        return httpx.Headers(self._header_items)

    def add_header(self, name: str, value: str) -> "RequestBuilder":
        """Append a header value; earlier values for `name` are kept."""
        self._header_items.append((name, str(value)))
        return self

    def set_header(self, name: str, value: str) -> "RequestBuilder":
        """Set a header, replacing any earlier values for `name`."""
        lowered = name.lower()
        self._header_items = [(k, v) for k, v in self._header_items if k.lower() != lowered]
        self._header_items.append((name, str(value)))
        return self

    def set_body_bytes(self, body: bytes, content_type: Optional[str] = None) -> "RequestBuilder":
        self.body = body
        if content_type:
            self.set_header("Content-Type", content_type)
        return self

    def set_json_body(self, obj: Any) -> "RequestBuilder":
        return self.set_body_bytes(encode_json(obj), "application/json")

    def build(self) -> Request:
        if not self.url:
            raise ConfigError("request URL has not been resolved")
        body = self.body
        headers = httpx.Headers(self._header_items)
        if body is not None and self.enable_gzip_compression:
            body = gzip.compress(body)
            headers["Content-Encoding"] = "gzip"
        url = self.url
        if self.query:
            url = f"{url}?{urlencode(self.query)}"
        return Request(
            method=self.method,
            url=url,
            headers=headers,
            query=list(self.query),
            body=body,
            accept=headers.get("Accept"),
        )


__all__ = [
    "GET",
    "POST",
    "Request",
    "RequestBuilder",
    "format_query_value",
]
