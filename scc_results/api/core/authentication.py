"""
Authentication
==============

Authenticators sign outgoing requests for the Results client.

The client only depends on the `Authenticator` interface:

    authenticator.validate()          # called once, at client construction
    authenticator.authenticate(req)   # called once per operation call

Token acquisition and refresh belong to the authenticator; implementations
that cache tokens must be thread-safe because a client may be shared between
threads.

Reference implementations:

- NoAuthAuthenticator:     leaves requests untouched (local testing, proxies)
- BearerTokenAuthenticator: Authorization: Bearer <token>
- BasicAuthenticator:      Authorization: Basic base64(<username>:<password>)

`authenticator_from_properties()` builds one of these from external
configuration (see `scc_results.api.core.config`):

    RESULTS_AUTH_TYPE=bearertoken
    RESULTS_BEARER_TOKEN=...
"""

from __future__ import annotations

import base64
from typing import TYPE_CHECKING, Mapping

from scc_results.api.core.errors import AuthError, ConfigError

if TYPE_CHECKING:
    from scc_results.api.core.request_builder import Request

AUTHTYPE_NOAUTH = "noauth"
AUTHTYPE_BEARERTOKEN = "bearertoken"
AUTHTYPE_BASIC = "basic"


class Authenticator:
    """
    Interface every authenticator implements.

    `authenticate` mutates the request's headers in place and raises
    AuthError when credentials cannot be obtained.
    """

    def authentication_type(self) -> str:
        raise NotImplementedError("Authenticator.authentication_type must be implemented")

    def validate(self) -> None:
        """Raise ConfigError if the authenticator is not usable."""

    def authenticate(self, request: "Request") -> None:
        raise NotImplementedError("Authenticator.authenticate must be implemented")


class NoAuthAuthenticator(Authenticator):
    """Performs no authentication."""

    def authentication_type(self) -> str:
        return AUTHTYPE_NOAUTH

    def authenticate(self, request: "Request") -> None:
        return None

    def __eq__(self, other: object) -> bool:
        return isinstance(other, NoAuthAuthenticator)

    def __hash__(self) -> int:
        return hash(AUTHTYPE_NOAUTH)


class BearerTokenAuthenticator(Authenticator):
    """Sends a caller-managed bearer token with every request."""

    def __init__(self, bearer_token: str) -> None:
        self.bearer_token = bearer_token

    def authentication_type(self) -> str:
        return AUTHTYPE_BEARERTOKEN

    def validate(self) -> None:
        if not self.bearer_token:
            raise ConfigError("the bearer token cannot be empty")

    def set_bearer_token(self, bearer_token: str) -> None:
        """Replace the token, e.g. after the caller refreshed it."""
        self.bearer_token = bearer_token

    def authenticate(self, request: "Request") -> None:
        if not self.bearer_token:
            raise AuthError("no bearer token available")
        request.headers["Authorization"] = f"Bearer {self.bearer_token}"


class BasicAuthenticator(Authenticator):
    """HTTP basic authentication."""

    def __init__(self, username: str, password: str) -> None:
        self.username = username
        self.password = password

    def authentication_type(self) -> str:
        return AUTHTYPE_BASIC

    def validate(self) -> None:
        if not self.username or not self.password:
            raise ConfigError("the username and password cannot be empty")
        for value in (self.username, self.password):
            if value.startswith(("{", '"')) or value.endswith(("}", '"')):
                raise ConfigError(
                    "the username and password must not start or end with '{', '}' or '\"'"
                )

    def authenticate(self, request: "Request") -> None:
        token = base64.b64encode(f"{self.username}:{self.password}".encode("utf-8")).decode("ascii")
        request.headers["Authorization"] = f"Basic {token}"


def authenticator_from_properties(properties: Mapping[str, str]) -> Authenticator:
    """
    Build an authenticator from service properties.

    `properties` uses the upper-case suffixes of the environment variables
    (AUTH_TYPE, BEARER_TOKEN, USERNAME, PASSWORD).

    Raises:
        ConfigError: AUTH_TYPE is missing or unsupported, or the resulting
            authenticator does not validate.
    """
    auth_type = (properties.get("AUTH_TYPE") or "").strip().lower()
    if not auth_type:
        raise ConfigError("no authentication type configured (AUTH_TYPE is missing)")

    authenticator: Authenticator
    if auth_type == AUTHTYPE_NOAUTH:
        authenticator = NoAuthAuthenticator()
    elif auth_type == AUTHTYPE_BEARERTOKEN:
        authenticator = BearerTokenAuthenticator(properties.get("BEARER_TOKEN", ""))
    elif auth_type == AUTHTYPE_BASIC:
        authenticator = BasicAuthenticator(
            properties.get("USERNAME", ""),
            properties.get("PASSWORD", ""),
        )
    else:
        raise ConfigError(f"unsupported authentication type {auth_type!r}")

    authenticator.validate()
    return authenticator


__all__ = [
    "AUTHTYPE_BASIC",
    "AUTHTYPE_BEARERTOKEN",
    "AUTHTYPE_NOAUTH",
    "Authenticator",
    "BasicAuthenticator",
    "BearerTokenAuthenticator",
    "NoAuthAuthenticator",
    "authenticator_from_properties",
]
