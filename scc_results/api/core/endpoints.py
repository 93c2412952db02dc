"""
Endpoints
=========

Service URL helpers.

The Results service is reached through a parameterized URL:

    https://{region}.cloud.ibm.com/instances/{instance_id}/v3

`construct_service_url()` fills the `{name}` placeholders from a mapping of
defaults overlaid with caller-provided values. Callers may only provide
variables the template knows about.
"""

from __future__ import annotations

import re
from typing import Mapping, Optional
from urllib.parse import urlsplit

from scc_results.api.core.errors import ConfigError

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")


def construct_service_url(
    template: str,
    defaults: Mapping[str, str],
    provided: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Substitute variables into a parameterized service URL.

    Raises:
        ConfigError: a provided variable is not one of the template's
            variables (the keys of `defaults`).
    """
    values = dict(defaults)
    for name, value in (provided or {}).items():
        if name not in defaults:
            raise ConfigError(f"unknown variable {name}")
        values[name] = value

    def _sub(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name not in values:
            raise ConfigError(f"unknown variable {name}")
        return str(values[name])

    return _PLACEHOLDER.sub(_sub, template)


def get_service_url_for_region(region: str) -> str:
    """The Results service has no regional endpoints."""
    raise ConfigError("service does not support regional URLs")


def validate_service_url(url: str) -> None:
    """
    Reject URLs that cannot be used as a request base.

    An empty URL is accepted here; requests made while it is empty fail with
    ConfigError.
    """
    if not url:
        return
    if "{" in url or "}" in url:
        raise ConfigError(f"invalid service URL {url!r}: unresolved URL variable")
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ConfigError(f"invalid service URL {url!r}: an absolute http(s) URL is required")


__all__ = [
    "construct_service_url",
    "get_service_url_for_region",
    "validate_service_url",
]
