"""Authenticated HTTP POST transport for node RPC calls."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import httpx

from bitcoin_rpc.core.errors import (
    RPCCancelledError,
    RPCConnectionError,
    RPCTimeoutError,
    TransportError,
)
from bitcoin_rpc.rpc.auth import basic_auth_header
from bitcoin_rpc.rpc.types import HttpResponse

if TYPE_CHECKING:
    from bitcoin_rpc.config.resolver import ResolvedConfig
    from bitcoin_rpc.core.cancel import CancellationToken

logger = logging.getLogger(__name__)

# Connection-phase timeout in seconds; the per-call timeout bounds the rest
DEFAULT_CONNECT_TIMEOUT = 10.0


class Transport:
    """Sends JSON bodies to the node with HTTP Basic auth.

    The underlying httpx.AsyncClient is created lazily on first use and
    shared by all concurrent calls. Nothing is retried or cached.

    Usage:
        transport = Transport(resolved)
        response = await transport.send(body, timeout=5000, cancel_token=token)
        await transport.aclose()
    """

    def __init__(
        self,
        resolved: ResolvedConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    ) -> None:
        """Initialize the transport.

        Args:
            resolved: Resolved endpoint and credentials.
            transport: Optional httpx transport (e.g. httpx.MockTransport in tests).
            connect_timeout: Connection-phase timeout in seconds.
        """
        self._endpoint = resolved.endpoint
        self._headers = {
            "Authorization": basic_auth_header(resolved.credentials),
            "Content-Type": "application/json",
        }
        self._transport = transport
        self._connect_timeout = connect_timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def url(self) -> str:
        """The endpoint URL every request is posted to."""
        return self._endpoint.url

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                transport=self._transport,
                timeout=self._timeout(self._endpoint.timeout),
            )
        return self._client

    def _timeout(self, timeout_ms: int) -> httpx.Timeout:
        return httpx.Timeout(timeout_ms / 1000, connect=self._connect_timeout)

    async def aclose(self) -> None:
        """Close the HTTP client. Safe to call multiple times."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def send(
        self,
        body: str,
        timeout: int | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> HttpResponse:
        """POST a serialized JSON body to the node.

        Args:
            body: Serialized JSON-RPC request or batch.
            timeout: Per-call timeout in milliseconds; overrides the
                configured default.
            cancel_token: Optional token that aborts the call when cancelled.

        Returns:
            Status, headers and body text of the response, whatever the status.

        Raises:
            RPCCancelledError: If the token is or becomes cancelled.
            RPCTimeoutError: If the call exceeds its timeout.
            RPCConnectionError: If the node cannot be reached.
            TransportError: On any other HTTP failure.
        """
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        timeout_ms = timeout or self._endpoint.timeout
        post = self._post(body, timeout_ms)
        if cancel_token is None:
            return await post

        loop = asyncio.get_running_loop()
        task = asyncio.ensure_future(post)

        def abort() -> None:
            loop.call_soon_threadsafe(task.cancel)

        cancel_token.on_cancel(abort)
        try:
            return await task
        except asyncio.CancelledError:
            if cancel_token.is_cancelled:
                logger.debug("RPC call to %s cancelled", self.url)
                raise RPCCancelledError("RPC call cancelled") from None
            # The awaiting task itself was cancelled; let that propagate
            raise
        finally:
            cancel_token.remove_callback(abort)
            if not task.done():
                task.cancel()

    async def _post(self, body: str, timeout_ms: int) -> HttpResponse:
        client = self._ensure_client()
        logger.debug("RPC POST %s (%d bytes, timeout=%dms)", self.url, len(body), timeout_ms)
        try:
            response = await client.post(
                self.url,
                content=body.encode("utf-8"),
                headers=self._headers,
                timeout=self._timeout(timeout_ms),
            )
        except httpx.TimeoutException as e:
            logger.warning("RPC request timed out: url=%s, timeout=%dms", self.url, timeout_ms)
            raise RPCTimeoutError(f"Request timed out after {timeout_ms}ms: {e}") from e
        except httpx.ConnectError as e:
            logger.warning("Connection failed to %s: %s", self.url, e)
            raise RPCConnectionError(f"Connection failed: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"HTTP error occurred: {e}") from e

        return HttpResponse(
            status_code=response.status_code,
            headers=response.headers,
            text=response.text,
        )
