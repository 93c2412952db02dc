"""
Results client
==============

`ResultsClient` is the entry point of the library. It composes the
per-area mixins over a single `BaseService`:

    from scc_results.api.core.authentication import BearerTokenAuthenticator
    from scc_results.api.reports import GetReportOptions
    from scc_results.client import ResultsClient

    client = ResultsClient(BearerTokenAuthenticator("..."))
    report, response = client.get_report(GetReportOptions(report_id="..."))

or, configured from ``RESULTS_*`` environment variables:

    client = ResultsClient.from_external_config()
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from scc_results.api.controls import ControlsMixin
from scc_results.api.core import endpoints
from scc_results.api.core.authentication import Authenticator, authenticator_from_properties
from scc_results.api.core.config import EnvironmentConfigProvider
from scc_results.api.core.errors import ConfigError
from scc_results.api.core.service import BaseService, ServiceOptions
from scc_results.api.evaluations import EvaluationsMixin
from scc_results.api.reports import ReportsMixin
from scc_results.api.resources import ResourcesMixin
from scc_results.http_client import ResultsHTTPClient

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_URL = "https://us-south.compliance.cloud.ibm.com/instances/instance_id/v3"
DEFAULT_SERVICE_NAME = "results"
SERVICE_VERSION = "V3"

PARAMETERIZED_SERVICE_URL = "https://{region}.cloud.ibm.com/instances/{instance_id}/v3"
DEFAULT_URL_VARIABLES = {
    "region": "us-south.compliance",
    "instance_id": "instance_id",
}


class ResultsClient(
    ReportsMixin,
    ControlsMixin,
    EvaluationsMixin,
    ResourcesMixin,
):
    """
    Client for the Results v3 service.

    Safe to share between threads for making requests; the configuration
    setters are not synchronised with in-flight calls.
    """

    def __init__(
        self,
        authenticator: Optional[Authenticator],
        *,
        url: Optional[str] = None,
        http_client: Optional[ResultsHTTPClient] = None,
    ) -> None:
        if authenticator is None:
            raise ConfigError("authenticator must not be None")
        options = ServiceOptions(
            url=DEFAULT_SERVICE_URL if url is None else url,
            authenticator=authenticator,
        )
        self._service = BaseService(
            options,
            service_name=DEFAULT_SERVICE_NAME,
            service_version=SERVICE_VERSION,
            http_client=http_client,
        )

    @classmethod
    def from_external_config(
        cls,
        service_name: str = DEFAULT_SERVICE_NAME,
        *,
        url: Optional[str] = None,
        authenticator: Optional[Authenticator] = None,
        config_provider: Optional[EnvironmentConfigProvider] = None,
        http_client: Optional[ResultsHTTPClient] = None,
    ) -> "ResultsClient":
        """
        Build a client from the ``<SERVICE_NAME>_*`` properties.

        An explicit `authenticator` or `url` wins over the configured one.

        Raises:
            ConfigError: no authenticator was given and the configuration
                has no usable AUTH_TYPE, or a property is malformed.
        """
        provider = config_provider or EnvironmentConfigProvider()
        if authenticator is None:
            authenticator = authenticator_from_properties(provider.get_service_properties(service_name))
        client = cls(authenticator, http_client=http_client)
        client._service.configure_service(service_name, provider)
        if url is not None:
            client.set_service_url(url)
        logger.debug(
            "Configured client from external config",
            extra={"service_name": service_name, "url": client.get_service_url()},
        )
        return client

    # Service URL ----------------------------------------------------------------

    @staticmethod
    def construct_service_url(provided: Optional[Mapping[str, str]] = None) -> str:
        """
        Build a service URL from `region` and `instance_id`.

        Raises:
            ConfigError: `provided` names a variable other than those two.
        """
        return endpoints.construct_service_url(PARAMETERIZED_SERVICE_URL, DEFAULT_URL_VARIABLES, provided)

    @staticmethod
    def get_service_url_for_region(region: str) -> str:
        return endpoints.get_service_url_for_region(region)

    def set_service_url(self, url: str) -> None:
        self._service.set_service_url(url)

    def get_service_url(self) -> str:
        return self._service.get_service_url()

    # Configuration ----------------------------------------------------------------

    @property
    def authenticator(self) -> Authenticator:
        return self._service.options.authenticator

    def set_default_headers(self, headers: Mapping[str, str]) -> None:
        self._service.set_default_headers(headers)

    def set_enable_gzip_compression(self, enable: bool) -> None:
        self._service.set_enable_gzip_compression(enable)

    def get_enable_gzip_compression(self) -> bool:
        return self._service.get_enable_gzip_compression()

    def enable_retries(self, max_retries: int = 0, max_retry_interval: float = 0) -> None:
        """Retry retryable failures; 0 selects the defaults (4 retries, 30 s cap)."""
        self._service.enable_retries(max_retries, max_retry_interval)

    def disable_retries(self) -> None:
        self._service.disable_retries()

    def set_disable_ssl_verification(self, disable: bool) -> None:
        """Raises ConfigError when the client was given its own `http_client`."""
        self._service.set_disable_ssl_verification(disable)

    def set_http_client(self, http_client: ResultsHTTPClient) -> None:
        self._service.set_http_client(http_client)

    # Lifecycle ----------------------------------------------------------------

    def clone(self) -> "ResultsClient":
        """
        Copy of this client with independent configuration. The
        authenticator is shared; the HTTP transport is shared until either
        side changes SSL verification, and is closed by whichever of them
        lets go of it last.
        """
        clone = ResultsClient.__new__(type(self))
        clone._service = self._service.clone()
        return clone

    def close(self) -> None:
        self._service.close()

    def __enter__(self) -> "ResultsClient":
        return self

    def __exit__(self, exc_type: Optional[type], exc: Optional[BaseException], tb: Optional[Any]) -> None:
        self.close()


__all__ = [
    "DEFAULT_SERVICE_NAME",
    "DEFAULT_SERVICE_URL",
    "DEFAULT_URL_VARIABLES",
    "PARAMETERIZED_SERVICE_URL",
    "ResultsClient",
]
