"""
External configuration
======================

Reads service properties from environment variables.

For a service named ``results`` the recognized variables are:

    RESULTS_URL              service base URL
    RESULTS_AUTH_TYPE        noauth | bearertoken | basic
    RESULTS_BEARER_TOKEN     (bearertoken)
    RESULTS_USERNAME         (basic)
    RESULTS_PASSWORD         (basic)
    RESULTS_DISABLE_SSL      true | false
    RESULTS_ENABLE_GZIP      true | false
    RESULTS_ENABLE_RETRIES   true | false
    RESULTS_MAX_RETRIES      integer
    RESULTS_RETRY_INTERVAL   seconds (integer)

The provider is injected into the client rather than read from global state,
so tests can pass a plain dict.
"""

from __future__ import annotations

import os
from typing import Dict, Mapping, Optional

from scc_results.api.core.errors import ConfigError


def _env_prefix(service_name: str) -> str:
    return service_name.upper().replace("-", "_") + "_"


class EnvironmentConfigProvider:
    """Service properties backed by an environment-like mapping."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
        self._environ = environ

    @property
    def environ(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    def get_service_properties(self, service_name: str) -> Dict[str, str]:
        """
        Return the properties of `service_name` with the prefix stripped:
        ``RESULTS_URL`` becomes ``URL``.
        """
        prefix = _env_prefix(service_name)
        return {
            key[len(prefix):]: value
            for key, value in self.environ.items()
            if key.startswith(prefix) and value != ""
        }


def parse_bool(value: Optional[str], name: str) -> Optional[bool]:
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    raise ConfigError(f"invalid boolean value {value!r} for {name}")


def parse_int(value: Optional[str], name: str) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError as exc:
        raise ConfigError(f"invalid integer value {value!r} for {name}") from exc


__all__ = [
    "EnvironmentConfigProvider",
    "parse_bool",
    "parse_int",
]
