"""Async client for the JSON-RPC interface of a Bitcoin full node."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Literal, cast, overload

import httpx

from bitcoin_rpc.config.loader import build_config, load_config
from bitcoin_rpc.config.resolver import ResolvedEndpoint, resolve_config
from bitcoin_rpc.config.schema import ClientConfig
from bitcoin_rpc.core.cancel import CancellationToken
from bitcoin_rpc.rpc.protocol import (
    build_batch,
    build_request,
    check_http_status,
    parse_batch_response,
    parse_response,
    serialize_request,
    unwrap,
)
from bitcoin_rpc.rpc.transport import Transport
from bitcoin_rpc.rpc.types import (
    BatchCall,
    GetBlockVerbosity,
    JSONParams,
    MethodName,
    Response,
    ScanAction,
)

logger = logging.getLogger(__name__)


def _named(**params: Any) -> dict[str, Any]:
    """Build named params, dropping keys left as None."""
    return {key: value for key, value in params.items() if value is not None}


class RPCClient:
    """Async client for a Bitcoin node's JSON-RPC server.

    Configuration is resolved once, at construction. Calls share no mutable
    state and may run concurrently from any number of tasks.

    Usage:
        async with RPCClient(network="regtest", cookie="~/.bitcoin/regtest/.cookie") as client:
            height = await client.getblockcount()
            best = await client.getblockhash(height)

        # Several calls in one round trip:
        outcome = await client.batch([
            {"method": "getblockhash", "params": [0], "id": "genesis"},
            {"method": "getblockcount", "params": []},
        ])
        genesis = RPCClient.unwrap(outcome[0])
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        **options: Any,
    ) -> None:
        """Initialize the client.

        Args:
            config: A ClientConfig. If None, one is built from options.
            transport: Optional httpx transport, e.g. httpx.MockTransport.
            **options: ClientConfig fields (network, host, port, protocol,
                username, password, cookie, timeout).

        Raises:
            ConfigError: If the configuration is invalid, including an
                unknown network name or missing credentials.
            TypeError: If both config and options are given.
        """
        if config is None:
            config = build_config(options)
        elif options:
            raise TypeError("Pass either a ClientConfig or keyword options, not both")

        self._config = config
        self._resolved = resolve_config(config)
        self._transport = Transport(self._resolved, transport=transport)
        logger.debug("RPCClient initialized: url=%s", self._transport.url)

    @classmethod
    def from_file(
        cls,
        path: Path | str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> RPCClient:
        """Create a client from a JSON config file holding ClientConfig fields."""
        return cls(load_config(Path(path)), transport=transport)

    @property
    def config(self) -> ClientConfig:
        """The configuration this client was built from."""
        return self._config

    @property
    def endpoint(self) -> ResolvedEndpoint:
        """The resolved host, port, protocol and default timeout."""
        return self._resolved.endpoint

    async def __aenter__(self) -> RPCClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the underlying HTTP connections."""
        await self._transport.aclose()

    # === Core primitives ===

    async def _call(
        self,
        method: MethodName,
        params: JSONParams | None = None,
        *,
        suffix: str | None = None,
        timeout: int | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> Any:
        """Make a single JSON-RPC call and return its result.

        Raises:
            AuthenticationError: On HTTP 401.
            RPCProtocolError: If the node returns an error object.
            MalformedResponseError: If the response matches no envelope.
            TransportError: On connection failure, timeout or cancellation.
        """
        request = build_request(method, params, suffix=suffix)
        logger.debug("RPC call: method=%s, id=%s", method, request.id)
        response = await self._transport.send(
            serialize_request(request),
            timeout=timeout,
            cancel_token=cancel_token,
        )
        check_http_status(response)
        return parse_response(response.text)

    async def batch(
        self,
        calls: Iterable[BatchCall | Mapping[str, Any]],
        *,
        timeout: int | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> list[dict[str, Any]]:
        """Send several calls in one round trip.

        Args:
            calls: BatchCall entries or mappings with "method", "params" and
                an optional "id". Missing ids become "{timestamp}-{index}".
            timeout: Per-call timeout in milliseconds.
            cancel_token: Optional cancellation token.

        Returns:
            The raw response envelopes, not unwrapped, since items may fail
            independently. Correlate by "id" and use RPCClient.unwrap().

        Raises:
            ValueError: If calls is empty.
            AuthenticationError: On HTTP 401.
            MalformedResponseError: If the response is not an array of envelopes.
            TransportError: On connection failure, timeout or cancellation.
        """
        requests = build_batch(calls)
        logger.debug("RPC batch: %d calls, methods=%s", len(requests), [r.method for r in requests])
        response = await self._transport.send(
            serialize_request(requests),
            timeout=timeout,
            cancel_token=cancel_token,
        )
        check_http_status(response)
        return parse_batch_response(response.text)

    @staticmethod
    def unwrap(envelope: Response | Mapping[str, Any]) -> Any:
        """Return the result of one batch item or raise its RPCProtocolError."""
        return unwrap(envelope)

    # === Blockchain ===

    async def getbestblockhash(
        self, *, timeout: int | None = None, cancel_token: CancellationToken | None = None
    ) -> str:
        """Hash of the tip of the most-work chain."""
        result = await self._call("getbestblockhash", timeout=timeout, cancel_token=cancel_token)
        return cast(str, result)

    async def getblockcount(
        self, *, timeout: int | None = None, cancel_token: CancellationToken | None = None
    ) -> int:
        """Height of the most-work chain."""
        result = await self._call("getblockcount", timeout=timeout, cancel_token=cancel_token)
        return cast(int, result)

    async def getblockchaininfo(
        self, *, timeout: int | None = None, cancel_token: CancellationToken | None = None
    ) -> dict[str, Any]:
        """State info about blockchain processing."""
        result = await self._call("getblockchaininfo", timeout=timeout, cancel_token=cancel_token)
        return cast(dict[str, Any], result)

    async def getblockhash(
        self,
        height: int,
        *,
        timeout: int | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> str:
        """Hash of the block at the given height in the active chain."""
        result = await self._call(
            "getblockhash", _named(height=height), timeout=timeout, cancel_token=cancel_token
        )
        return cast(str, result)

    @overload
    async def getblockheader(
        self,
        blockhash: str,
        verbose: Literal[False],
        *,
        timeout: int | None = ...,
        cancel_token: CancellationToken | None = ...,
    ) -> str: ...

    @overload
    async def getblockheader(
        self,
        blockhash: str,
        verbose: Literal[True] = ...,
        *,
        timeout: int | None = ...,
        cancel_token: CancellationToken | None = ...,
    ) -> dict[str, Any]: ...

    async def getblockheader(
        self,
        blockhash: str,
        verbose: bool = True,
        *,
        timeout: int | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> str | dict[str, Any]:
        """Block header by hash.

        Args:
            blockhash: The block hash.
            verbose: True for a decoded object, False for serialized hex.
        """
        return await self._call(
            "getblockheader",
            _named(blockhash=blockhash, verbose=verbose),
            timeout=timeout,
            cancel_token=cancel_token,
        )

    @overload
    async def getblock(
        self,
        blockhash: str,
        verbosity: Literal[0],
        *,
        timeout: int | None = ...,
        cancel_token: CancellationToken | None = ...,
    ) -> str: ...

    @overload
    async def getblock(
        self,
        blockhash: str,
        verbosity: Literal[1] = ...,
        *,
        timeout: int | None = ...,
        cancel_token: CancellationToken | None = ...,
    ) -> dict[str, Any]: ...

    async def getblock(
        self,
        blockhash: str,
        verbosity: GetBlockVerbosity = 1,
        *,
        timeout: int | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> str | dict[str, Any]:
        """Block by hash.

        Args:
            blockhash: The block hash.
            verbosity: 0 for serialized hex, 1 for an object with txids.
        """
        return await self._call(
            "getblock",
            _named(blockhash=blockhash, verbosity=verbosity),
            timeout=timeout,
            cancel_token=cancel_token,
        )

    async def scantxoutset(
        self,
        action: ScanAction,
        scanobjects: list[str] | list[dict[str, Any]] | None = None,
        *,
        timeout: int | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> dict[str, Any]:
        """Scan the UTXO set for outputs matching descriptors.

        Args:
            action: "start", "abort" or "status".
            scanobjects: Descriptors, as strings or {"desc", "range"} objects.
                Required for "start".
        """
        result = await self._call(
            "scantxoutset",
            _named(action=action, scanobjects=scanobjects),
            timeout=timeout,
            cancel_token=cancel_token,
        )
        return cast(dict[str, Any], result)

    # === Mempool ===

    async def getmempoolinfo(
        self, *, timeout: int | None = None, cancel_token: CancellationToken | None = None
    ) -> dict[str, Any]:
        """Details on the active state of the mempool."""
        result = await self._call("getmempoolinfo", timeout=timeout, cancel_token=cancel_token)
        return cast(dict[str, Any], result)

    @overload
    async def getrawmempool(
        self,
        verbose: Literal[False] = ...,
        mempool_sequence: Literal[False] = ...,
        *,
        timeout: int | None = ...,
        cancel_token: CancellationToken | None = ...,
    ) -> list[str]: ...

    @overload
    async def getrawmempool(
        self,
        verbose: bool = ...,
        mempool_sequence: bool = ...,
        *,
        timeout: int | None = ...,
        cancel_token: CancellationToken | None = ...,
    ) -> dict[str, Any]: ...

    async def getrawmempool(
        self,
        verbose: bool = False,
        mempool_sequence: bool = False,
        *,
        timeout: int | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> list[str] | dict[str, Any]:
        """Transactions in the mempool.

        Args:
            verbose: True for an object keyed by txid with entry details.
            mempool_sequence: When not verbose, True for
                {"txids": [...], "mempool_sequence": n}.

        Returns:
            A list of txids unless verbose or mempool_sequence is set.
        """
        return await self._call(
            "getrawmempool",
            _named(verbose=verbose, mempool_sequence=mempool_sequence),
            timeout=timeout,
            cancel_token=cancel_token,
        )

    # === Raw transactions ===

    @overload
    async def getrawtransaction(
        self,
        txid: str,
        verbose: Literal[False] = ...,
        blockhash: str | None = ...,
        *,
        timeout: int | None = ...,
        cancel_token: CancellationToken | None = ...,
    ) -> str: ...

    @overload
    async def getrawtransaction(
        self,
        txid: str,
        verbose: Literal[True],
        blockhash: str | None = ...,
        *,
        timeout: int | None = ...,
        cancel_token: CancellationToken | None = ...,
    ) -> dict[str, Any]: ...

    async def getrawtransaction(
        self,
        txid: str,
        verbose: bool = False,
        blockhash: str | None = None,
        *,
        timeout: int | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> str | dict[str, Any]:
        """Raw transaction data.

        Args:
            txid: The transaction id.
            verbose: True for a decoded object, False for serialized hex.
            blockhash: Block to look in, for nodes without -txindex.
        """
        return await self._call(
            "getrawtransaction",
            _named(txid=txid, verbose=verbose, blockhash=blockhash),
            timeout=timeout,
            cancel_token=cancel_token,
        )

    async def sendrawtransaction(
        self,
        hexstring: str,
        maxfeerate: float | str | None = None,
        *,
        timeout: int | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> str:
        """Submit a serialized transaction to the node and network.

        Args:
            hexstring: Hex of the signed transaction.
            maxfeerate: Reject transactions above this fee rate (BTC/kvB).

        Returns:
            The transaction id.
        """
        result = await self._call(
            "sendrawtransaction",
            _named(hexstring=hexstring, maxfeerate=maxfeerate),
            timeout=timeout,
            cancel_token=cancel_token,
        )
        return cast(str, result)

    # === Mining ===

    async def getblocktemplate(
        self,
        template_request: dict[str, Any] | None = None,
        *,
        timeout: int | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> dict[str, Any]:
        """Block template for mining.

        Args:
            template_request: BIP 22/23 request object. Defaults to
                {"rules": ["segwit"]}, which current nodes require.
        """
        if template_request is None:
            template_request = {"rules": ["segwit"]}
        result = await self._call(
            "getblocktemplate",
            _named(template_request=template_request),
            timeout=timeout,
            cancel_token=cancel_token,
        )
        return cast(dict[str, Any], result)

    # === Network / control ===

    async def getnetworkinfo(
        self, *, timeout: int | None = None, cancel_token: CancellationToken | None = None
    ) -> dict[str, Any]:
        """State info about P2P networking."""
        result = await self._call("getnetworkinfo", timeout=timeout, cancel_token=cancel_token)
        return cast(dict[str, Any], result)

    async def getuptime(
        self, *, timeout: int | None = None, cancel_token: CancellationToken | None = None
    ) -> int:
        """Seconds the node has been running (RPC method "uptime")."""
        result = await self._call("uptime", timeout=timeout, cancel_token=cancel_token)
        return cast(int, result)
