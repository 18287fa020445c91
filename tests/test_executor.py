"""Tests for Client request execution."""

import os
import sys

import httpx
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from monitor.client import Client
from monitor.domain.exceptions import ExecutionError, StatusFailure, TransportFailure
from monitor.domain.models import CorrelationContext


def _client(handler, **kwargs) -> Client:
    """Client whose transport answers through `handler`."""
    return Client(httpx.AsyncClient(transport=httpx.MockTransport(handler)), **kwargs)


class TrackingStream(httpx.AsyncByteStream):
    """Response body that records whether it was closed."""

    def __init__(self, chunks: list[bytes], error: Exception | None = None):
        self.chunks = chunks
        self.error = error
        self.closed = False

    async def __aiter__(self):
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error

    async def aclose(self) -> None:
        self.closed = True


class StubHTTPClient:
    """Transport that hands back a prepared, unread response."""

    def __init__(self, response: httpx.Response):
        self.response = response
        self.requests: list[httpx.Request] = []

    async def send(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response


class TestExecuteSuccess:
    """2xx responses."""

    @pytest.mark.anyio
    @pytest.mark.parametrize("status", [200, 201, 204, 299])
    async def test_returns_exact_body_for_2xx(self, status):
        """Should return the bytes written by the server, unchanged."""
        client = _client(lambda request: httpx.Response(status, content=b"Hello, client"))

        body = await client.execute(client.build_request("GET", "http://example.com"))

        assert body == b"Hello, client"

    @pytest.mark.anyio
    async def test_binary_body_is_not_decoded(self):
        payload = bytes(range(256))
        client = _client(lambda request: httpx.Response(200, content=payload))

        body = await client.execute(client.build_request("GET", "http://example.com"))

        assert body == payload

    @pytest.mark.anyio
    async def test_do_request_sends_token_and_correlation(self):
        """do_request should build with the standard headers and execute."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=b"ok")

        client = _client(
            handler,
            token="myToken",
            correlation=CorrelationContext(flow_id="flow-9"),
        )

        body = await client.do_request(
            "POST", "http://example.com/items", b'{"a": 1}', content_type="application/json"
        )

        assert body == b"ok"
        assert len(seen) == 1
        assert seen[0].headers["Authorization"] == "Bearer myToken"
        assert seen[0].headers["X-Flow-Id"] == "flow-9"
        assert seen[0].headers["Content-Type"] == "application/json"
        assert seen[0].content == b'{"a": 1}'


class TestExecuteStatusFailure:
    """Non-2xx responses."""

    @pytest.mark.anyio
    @pytest.mark.parametrize("status", [301, 400, 404, 429, 500, 503])
    async def test_non_2xx_raises_with_body(self, status):
        """Should raise StatusFailure carrying the status and the body verbatim."""
        client = _client(lambda request: httpx.Response(status, content=b"something broke"))

        with pytest.raises(StatusFailure) as exc_info:
            await client.execute(client.build_request("GET", "http://example.com"))

        assert exc_info.value.status_code == status
        assert exc_info.value.body == b"something broke"
        assert "something broke" in str(exc_info.value)
        assert str(status) in str(exc_info.value)

    @pytest.mark.anyio
    async def test_server_exploded(self):
        """A 500 with a body should mention both the status and the body."""
        client = _client(lambda request: httpx.Response(500, content=b"server exploded"))

        with pytest.raises(ExecutionError) as exc_info:
            await client.do_request("GET", "http://example.com")

        message = str(exc_info.value)
        assert "500" in message
        assert "server exploded" in message

    @pytest.mark.anyio
    async def test_empty_error_body(self):
        """Without a body the message is the status alone."""
        client = _client(lambda request: httpx.Response(404))

        with pytest.raises(StatusFailure) as exc_info:
            await client.do_request("GET", "http://example.com")

        assert str(exc_info.value) == "status 404"
        assert exc_info.value.body == b""

    @pytest.mark.anyio
    async def test_response_closed_on_status_failure(self):
        """The response stream is closed even when the status is an error."""
        stream = TrackingStream([b"nope"])
        client = Client(StubHTTPClient(httpx.Response(502, stream=stream)))

        with pytest.raises(StatusFailure):
            await client.do_request("GET", "http://example.com")

        assert stream.closed is True


class TestExecuteTransportFailure:
    """Failures before a full response was read."""

    @pytest.mark.anyio
    async def test_connection_failure_is_passed_through(self):
        """The transport's error is surfaced as-is, with no status interpretation."""
        error = httpx.ConnectError("connection refused")

        def handler(request: httpx.Request) -> httpx.Response:
            raise error

        client = _client(handler)

        with pytest.raises(TransportFailure) as exc_info:
            await client.do_request("GET", "http://example.com")

        assert exc_info.value.cause is error
        assert exc_info.value.__cause__ is error
        assert str(exc_info.value) == "connection refused"
        assert not isinstance(exc_info.value, StatusFailure)

    @pytest.mark.anyio
    async def test_timeout_is_a_transport_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = _client(handler)

        with pytest.raises(TransportFailure, match="timed out"):
            await client.do_request("GET", "http://example.com")

    @pytest.mark.anyio
    async def test_body_read_failure_on_2xx(self):
        """A 2xx whose body cannot be read is not a success."""
        stream = TrackingStream([b"partial"], error=httpx.ReadError("connection reset"))
        client = Client(StubHTTPClient(httpx.Response(200, stream=stream)))

        with pytest.raises(TransportFailure, match="connection reset"):
            await client.do_request("GET", "http://example.com")

        assert stream.closed is True


class TestExecuteRaw:
    """Raw execution never interprets the status."""

    @pytest.mark.anyio
    async def test_error_status_is_returned(self):
        client = _client(
            lambda request: httpx.Response(500, content=b"server exploded", headers={"X-Debug": "1"})
        )

        response = await client.execute_raw(client.build_request("GET", "http://example.com"))

        assert response.status_code == 500
        assert response.body == b"server exploded"
        assert response.is_success is False
        assert response.headers["x-debug"] == "1"

    @pytest.mark.anyio
    async def test_success_status_is_returned(self):
        client = _client(lambda request: httpx.Response(200, content=b"fine"))

        response = await client.execute_raw(client.build_request("GET", "http://example.com"))

        assert response.status_code == 200
        assert response.body == b"fine"
        assert response.is_success is True

    @pytest.mark.anyio
    async def test_transport_failure_still_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("no route to host")

        client = _client(handler)

        with pytest.raises(TransportFailure):
            await client.execute_raw(client.build_request("GET", "http://example.com"))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
