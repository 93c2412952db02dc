"""
SDK identification headers
==========================

Every request names the SDK, the service version and the operation it
performs so the service can attribute traffic:

    User-Agent: scc-results-python-sdk/<SDK_VERSION> (lang=python; ...)
    X-IBMCloud-SDK-Analytics: service_name=results;service_version=V3;operation_id=GetReport

These values are informational; the server never changes behaviour based on
them.
"""

from __future__ import annotations

import platform
from typing import Dict

SDK_NAME: str = "scc-results-python-sdk"
SDK_VERSION: str = "1.0.0"

API_VERSION: str = "3.0.0"
"""Version of the Results API this client was written against."""

HEADER_NAME_USER_AGENT = "User-Agent"
HEADER_NAME_SDK_ANALYTICS = "X-IBMCloud-SDK-Analytics"


def _system_info() -> str:
    return "lang=python; arch={}; os={}; python.version={}".format(
        platform.machine(), platform.system(), platform.python_version()
    )


def user_agent() -> str:
    return f"{SDK_NAME}/{SDK_VERSION} ({_system_info()})"


def get_sdk_headers(service_name: str, service_version: str, operation_id: str) -> Dict[str, str]:
    """Build the identification headers for one operation."""
    return {
        HEADER_NAME_USER_AGENT: user_agent(),
        HEADER_NAME_SDK_ANALYTICS: (
            f"service_name={service_name};"
            f"service_version={service_version};"
            f"operation_id={operation_id}"
        ),
    }


__all__ = [
    "SDK_NAME",
    "SDK_VERSION",
    "API_VERSION",
    "HEADER_NAME_USER_AGENT",
    "HEADER_NAME_SDK_ANALYTICS",
    "get_sdk_headers",
    "user_agent",
]
