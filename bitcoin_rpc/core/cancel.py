"""Cancellation support for in-flight RPC calls."""

import logging
from collections.abc import Callable

from bitcoin_rpc.core.errors import RPCCancelledError

logger = logging.getLogger(__name__)


class CancellationToken:
    """Token for cooperative cancellation of RPC calls.

    The caller keeps the token and passes it to one or more calls. Calling
    cancel() aborts every call still waiting on the network; calls issued
    with an already cancelled token fail before anything is sent.

    Example:
        token = CancellationToken()
        task = asyncio.create_task(client.getblockcount(cancel_token=token))

        # Elsewhere, possibly from another thread:
        token.cancel()
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._callbacks: list[Callable[[], None]] = []

    @property
    def is_cancelled(self) -> bool:
        """Check if cancellation has been requested."""
        return self._cancelled

    def cancel(self) -> None:
        """Request cancellation and notify callbacks."""
        if self._cancelled:
            return
        self._cancelled = True
        for callback in list(self._callbacks):
            self._invoke(callback)

    def on_cancel(self, callback: Callable[[], None]) -> None:
        """Register a callback to be called when cancelled.

        If already cancelled, callback is invoked immediately.
        """
        self._callbacks.append(callback)
        if self._cancelled:
            self._invoke(callback)

    def remove_callback(self, callback: Callable[[], None]) -> None:
        """Unregister a callback added with on_cancel(). Unknown callbacks are ignored."""
        try:
            self._callbacks.remove(callback)
        except ValueError:
            pass

    def raise_if_cancelled(self) -> None:
        """Raise RPCCancelledError if cancellation was requested."""
        if self._cancelled:
            raise RPCCancelledError("RPC call cancelled")

    @staticmethod
    def _invoke(callback: Callable[[], None]) -> None:
        # A failing callback must not stop the others from running
        try:
            callback()
        except Exception:
            logger.debug("Cancellation callback failed", exc_info=True)
