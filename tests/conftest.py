"""Shared fixtures: a ResultsClient wired to an in-memory httpx transport."""

from typing import Any, Callable, Iterator, List, Tuple, Union

import httpx
import pytest

from scc_results.api.core.authentication import NoAuthAuthenticator
from scc_results.client import ResultsClient
from scc_results.http_client import HttpxResultsHTTPClient

SERVICE_URL = "https://results.example.com/instances/i1/v3"

Reply = Union[httpx.Response, BaseException, Callable[[httpx.Request], httpx.Response]]


class ScriptedTransport:
    """
    MockTransport handler that answers with queued replies in order and
    records every request it receives.
    """

    def __init__(self, *replies: Reply) -> None:
        self.replies: List[Reply] = list(replies)
        self.requests: List[httpx.Request] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.replies:
            raise AssertionError(f"unexpected request {request.method} {request.url}")
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            return reply(request)
        return reply


def make_http_client(transport: ScriptedTransport) -> HttpxResultsHTTPClient:
    return HttpxResultsHTTPClient(httpx.Client(transport=httpx.MockTransport(transport)))


@pytest.fixture
def scripted_client() -> Iterator[Callable[..., Tuple[ResultsClient, ScriptedTransport]]]:
    """Factory: ``client, transport = scripted_client(reply, ...)``."""
    created: List[Any] = []

    def factory(*replies: Reply, url: str = SERVICE_URL) -> Tuple[ResultsClient, ScriptedTransport]:
        transport = ScriptedTransport(*replies)
        http = make_http_client(transport)
        created.append(http)
        client = ResultsClient(NoAuthAuthenticator(), url=url, http_client=http)
        return client, transport

    yield factory

    for http in created:
        http.client.close()
