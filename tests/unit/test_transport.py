"""Unit tests for the HTTP transport adapter."""

import asyncio
import base64

import httpx
import pytest

from bitcoin_rpc.config.resolver import ResolvedConfig, ResolvedEndpoint
from bitcoin_rpc.core.cancel import CancellationToken
from bitcoin_rpc.core.errors import (
    RPCCancelledError,
    RPCConnectionError,
    RPCTimeoutError,
    TransportError,
)
from bitcoin_rpc.rpc.auth import Credentials
from bitcoin_rpc.rpc.transport import DEFAULT_CONNECT_TIMEOUT, Transport


@pytest.fixture
def resolved() -> ResolvedConfig:
    return ResolvedConfig(
        endpoint=ResolvedEndpoint(host="127.0.0.1", port=18332, protocol="http", timeout=30000),
        credentials=Credentials("rpcuser", "s3cret"),
    )


class TestTransportSend:
    """Tests for Transport.send."""

    @pytest.mark.asyncio
    async def test_posts_json_with_basic_auth(self, resolved):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": "1", "result": 1})

        transport = Transport(resolved, transport=httpx.MockTransport(handler))
        try:
            response = await transport.send('{"jsonrpc":"2.0"}')
        finally:
            await transport.aclose()

        assert response.status_code == 200
        assert response.content_type == "application/json"
        assert '"result"' in response.text

        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "http://127.0.0.1:18332/"
        assert request.headers["content-type"] == "application/json"
        expected = base64.b64encode(b"rpcuser:s3cret").decode()
        assert request.headers["authorization"] == f"Basic {expected}"
        assert request.content == b'{"jsonrpc":"2.0"}'

    @pytest.mark.asyncio
    async def test_non_200_is_returned_not_raised(self, resolved):
        transport = Transport(
            resolved,
            transport=httpx.MockTransport(lambda request: httpx.Response(500, text="boom")),
        )
        response = await transport.send("{}")
        await transport.aclose()

        assert response.status_code == 500
        assert response.text == "boom"

    @pytest.mark.asyncio
    async def test_default_timeout_from_config(self, resolved):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        transport = Transport(resolved, transport=httpx.MockTransport(handler))
        await transport.send("{}")
        await transport.aclose()

        timeout = seen[0].extensions["timeout"]
        assert timeout["read"] == 30.0
        assert timeout["connect"] == DEFAULT_CONNECT_TIMEOUT

    @pytest.mark.asyncio
    async def test_per_call_timeout_overrides_default(self, resolved):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        transport = Transport(resolved, transport=httpx.MockTransport(handler))
        await transport.send("{}", timeout=1500)
        await transport.aclose()

        timeout = seen[0].extensions["timeout"]
        assert timeout["read"] == 1.5
        assert timeout["connect"] == DEFAULT_CONNECT_TIMEOUT

    @pytest.mark.asyncio
    async def test_timeout_raises_timeout_error(self, resolved):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        transport = Transport(resolved, transport=httpx.MockTransport(handler))
        with pytest.raises(RPCTimeoutError, match="timed out"):
            await transport.send("{}", timeout=10)
        await transport.aclose()

    @pytest.mark.asyncio
    async def test_connect_error_raises_connection_error(self, resolved):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        transport = Transport(resolved, transport=httpx.MockTransport(handler))
        with pytest.raises(RPCConnectionError, match="Connection failed"):
            await transport.send("{}")
        await transport.aclose()

    @pytest.mark.asyncio
    async def test_other_http_errors_raise_transport_error(self, resolved):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.RemoteProtocolError("peer closed connection", request=request)

        transport = Transport(resolved, transport=httpx.MockTransport(handler))
        with pytest.raises(TransportError, match="HTTP error"):
            await transport.send("{}")
        await transport.aclose()


class TestTransportCancellation:
    """Tests for cancellation of in-flight calls."""

    @pytest.mark.asyncio
    async def test_already_cancelled_token_sends_nothing(self, resolved):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        token = CancellationToken()
        token.cancel()
        transport = Transport(resolved, transport=httpx.MockTransport(handler))

        with pytest.raises(RPCCancelledError):
            await transport.send("{}", cancel_token=token)

        assert seen == []
        await transport.aclose()

    @pytest.mark.asyncio
    async def test_cancel_aborts_in_flight_call(self, resolved):
        started = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            started.set()
            await asyncio.sleep(30)
            return httpx.Response(200, json={})

        token = CancellationToken()
        transport = Transport(resolved, transport=httpx.MockTransport(handler))
        call = asyncio.create_task(transport.send("{}", cancel_token=token))

        await asyncio.wait_for(started.wait(), timeout=5)
        token.cancel()

        with pytest.raises(RPCCancelledError):
            await asyncio.wait_for(call, timeout=5)
        await transport.aclose()

    @pytest.mark.asyncio
    async def test_completed_call_unregisters_callback(self, resolved):
        """A token reused after a finished call does not touch that call."""
        transport = Transport(
            resolved,
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})),
        )
        token = CancellationToken()

        response = await transport.send("{}", cancel_token=token)
        token.cancel()

        assert response.status_code == 200
        assert token._callbacks == []
        await transport.aclose()

    @pytest.mark.asyncio
    async def test_outer_task_cancellation_propagates(self, resolved):
        """Cancelling the awaiting task itself is not reported as a token cancel."""
        started = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            started.set()
            await asyncio.sleep(30)
            return httpx.Response(200, json={})

        token = CancellationToken()
        transport = Transport(resolved, transport=httpx.MockTransport(handler))
        call = asyncio.create_task(transport.send("{}", cancel_token=token))

        await asyncio.wait_for(started.wait(), timeout=5)
        call.cancel()

        with pytest.raises(asyncio.CancelledError):
            await call
        await transport.aclose()


class TestTransportLifecycle:
    """Tests for client creation and closing."""

    @pytest.mark.asyncio
    async def test_aclose_is_idempotent(self, resolved):
        transport = Transport(
            resolved,
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})),
        )
        await transport.send("{}")
        await transport.aclose()
        await transport.aclose()

    @pytest.mark.asyncio
    async def test_client_is_reused(self, resolved):
        transport = Transport(
            resolved,
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})),
        )
        await transport.send("{}")
        first = transport._client
        await transport.send("{}")
        assert transport._client is first
        await transport.aclose()
        assert transport._client is None
