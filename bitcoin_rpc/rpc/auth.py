"""Credential resolution for node RPC authentication.

The node accepts HTTP Basic auth with either the rpcuser/rpcpassword pair
from its configuration, or the pair it writes to a cookie file on startup:

    ~/.bitcoin/
    ├── .cookie              # mainnet
    ├── regtest/.cookie
    ├── signet/.cookie
    └── testnet3/.cookie

Cookie file format: a single line "username:password". The node creates it
with mode 0o600 and deletes it on clean shutdown.

Example usage:
    credentials = resolve_credentials(cookie=Path("~/.bitcoin/.cookie").expanduser())
    headers = {"Authorization": basic_auth_header(credentials)}
"""

from __future__ import annotations

import base64
import logging
import stat
import sys
from dataclasses import dataclass, field
from pathlib import Path

from bitcoin_rpc.core.errors import AuthConfigError, CookieFileError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credentials:
    """A resolved username/password pair. The password is kept out of repr()."""

    username: str
    password: str = field(repr=False)


def check_cookie_permissions(path: Path) -> bool:
    """Check that a cookie file is not readable by group or others.

    Insecure permissions only log a warning; the cookie is still used, since
    the node is the one that owns and writes the file.

    Args:
        path: Path to the cookie file.

    Returns:
        True if permissions are 0600 or stricter (always True on Windows).

    Raises:
        OSError: If the file cannot be stat'd.
    """
    if sys.platform == "win32":
        return True

    mode = path.stat().st_mode
    if mode & (stat.S_IRWXG | stat.S_IRWXO):
        logger.warning(
            "Cookie file %s has insecure permissions (%s). "
            "Should be 0600 (owner read/write only).",
            path, oct(mode)[-3:],
        )
        return False
    return True


def parse_cookie(content: str) -> tuple[str, str]:
    """Split cookie file content on the first colon into (username, password).

    Raises:
        ValueError: If either trimmed field is empty or there is no colon.
    """
    username, sep, password = content.partition(":")
    username = username.strip()
    password = password.strip()
    if not sep or not username or not password:
        raise ValueError("expected a single 'username:password' line")
    return username, password


def read_cookie_file(path: Path) -> Credentials:
    """Read credentials from a node cookie file.

    Args:
        path: Path to the cookie file.

    Returns:
        The credentials stored in the file.

    Raises:
        CookieFileError: If the file is missing, access is denied, or the
            content is not a "username:password" pair.
        OSError: Any other I/O failure, unchanged.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise CookieFileError(f"File not found: {path}", path=str(path)) from e
    except PermissionError as e:
        raise CookieFileError(f"Permission denied: {path}", path=str(path)) from e
    except UnicodeDecodeError as e:
        raise CookieFileError(f"Cookie file is invalid: {path}", path=str(path)) from e

    try:
        username, password = parse_cookie(content)
    except ValueError as e:
        raise CookieFileError(f"Cookie file is invalid: {path}: {e}", path=str(path)) from e

    check_cookie_permissions(path)
    logger.debug("Loaded RPC credentials from cookie file %s", path)
    return Credentials(username=username, password=password)


def resolve_credentials(
    username: str | None = None,
    password: str | None = None,
    cookie: Path | None = None,
) -> Credentials:
    """Resolve the credentials used for every call.

    A cookie file takes precedence over an explicit username/password.

    Args:
        username: Explicit RPC username.
        password: Explicit RPC password.
        cookie: Optional path to the node cookie file.

    Returns:
        Credentials with a non-empty username and password.

    Raises:
        CookieFileError: If the cookie file cannot be used.
        AuthConfigError: If no complete username/password pair is available.
    """
    if cookie is not None:
        return read_cookie_file(cookie)

    if not username or not password:
        raise AuthConfigError(
            "Unauthenticated RPC communication is not supported. "
            "Provide a valid username and password, or a cookie file."
        )
    return Credentials(username=username, password=password)


def basic_auth_header(credentials: Credentials) -> str:
    """Build the value of the HTTP Basic Authorization header."""
    raw = f"{credentials.username}:{credentials.password}".encode()
    return "Basic " + base64.b64encode(raw).decode("ascii")
