"""Pydantic models for bitcoin_rpc client configuration."""

from enum import Enum
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Protocol = Literal["http", "https"]


class Network(str, Enum):
    """Bitcoin networks with a well-known RPC port."""

    MAINNET = "mainnet"
    REGTEST = "regtest"
    SIGNET = "signet"
    TESTNET = "testnet"


# Default RPC port per network
NETWORK_PORTS: dict[Network, int] = {
    Network.MAINNET: 8332,
    Network.REGTEST: 18332,
    Network.SIGNET: 38332,
    Network.TESTNET: 18332,
}

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PROTOCOL: Protocol = "http"
DEFAULT_TIMEOUT_MS = 30000


class ClientConfig(BaseModel):
    """Constructor input for RPCClient.

    Every field is optional, but authentication must resolve: either a
    cookie file or a non-empty username and password.

    Example in config.json:
        {
            "network": "regtest",
            "cookie": "~/.bitcoin/regtest/.cookie",
            "timeout": 10000
        }
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    network: Network | None = None
    """Network name; selects the default port."""

    host: str | None = None
    """Node host. Defaults to the loopback address."""

    port: int | None = Field(default=None, ge=1, le=65535)
    """Explicit port, overrides the network default."""

    protocol: Protocol | None = None
    """URL scheme, http or https."""

    username: str | None = None
    """RPC username (ignored when a cookie file is given)."""

    password: str | None = Field(default=None, repr=False)
    """RPC password (ignored when a cookie file is given)."""

    cookie: Path | None = None
    """Path to the node's .cookie file."""

    timeout: int | None = Field(default=None, gt=0)
    """Default per-call timeout in milliseconds."""

    @field_validator("network", "host", "protocol", "username", "password", "cookie", mode="before")
    @classmethod
    def empty_string_is_unset(cls, v: Any) -> Any:
        """Treat empty strings as not supplied."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("port", "timeout", mode="before")
    @classmethod
    def zero_is_unset(cls, v: Any) -> Any:
        """Treat 0 as not supplied, so the default applies."""
        if v == 0 and not isinstance(v, bool):
            return None
        return v

    @field_validator("cookie")
    @classmethod
    def expand_cookie_path(cls, v: Path | None) -> Path | None:
        """Expand ~ in the cookie path."""
        if v is None:
            return None
        return v.expanduser()
