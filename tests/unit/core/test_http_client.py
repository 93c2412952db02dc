"""Unit tests for the httpx transport adapter."""

import httpx
import pytest

from scc_results.api.core.context import RequestContext
from scc_results.api.core.errors import CanceledError, TransportError
from scc_results.api.core.request_builder import GET, Request
from scc_results.http_client import HttpxResultsHTTPClient

URL = "https://results.example.com/v3/reports"


def adapter(handler, **kwargs):
    return HttpxResultsHTTPClient(httpx.Client(transport=httpx.MockTransport(handler)), **kwargs)


class TestHttpxResultsHTTPClient:
    def test_sends_method_url_headers_and_body(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, content=b"ok")

        request = Request(method=GET, url=URL + "?limit=1", headers=httpx.Headers({"X-Test": "1"}))
        response = adapter(handler).send(request, RequestContext.background())
        assert response.status_code == 200
        assert response.read() == b"ok"
        assert seen[0].method == "GET"
        assert seen[0].url.params["limit"] == "1"
        assert seen[0].headers["X-Test"] == "1"

    def test_timeout_within_deadline_is_canceled(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(CanceledError, match="deadline exceeded") as exc_info:
            adapter(handler).send(Request(method=GET, url=URL), RequestContext.with_timeout(5))
        assert isinstance(exc_info.value.cause, httpx.ReadTimeout)

    def test_timeout_without_deadline_is_transport_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(TransportError, match="timed out"):
            adapter(handler).send(Request(method=GET, url=URL), RequestContext.background())

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(TransportError, match="refused"):
            adapter(handler).send(Request(method=GET, url=URL), RequestContext.background())

    def test_canceled_context_sends_nothing(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200)

        context = RequestContext.background()
        context.cancel()
        with pytest.raises(CanceledError):
            adapter(handler).send(Request(method=GET, url=URL), context)
        assert calls == []

    def test_close_keeps_supplied_client_open(self):
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        HttpxResultsHTTPClient(client).close()
        assert not client.is_closed
        client.close()

    def test_owned_client_closed(self):
        with HttpxResultsHTTPClient(timeout=1.0) as http:
            inner = http.client
        assert inner.is_closed
