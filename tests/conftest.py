"""Shared pytest fixtures and configuration for pytest."""

import json
import sys
from collections.abc import Callable
from typing import Any

import httpx
import pytest


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for platform-specific tests."""
    config.addinivalue_line("markers", "unix_only: mark test to run only on Unix")


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Auto-skip tests based on platform markers."""
    skip_unix = pytest.mark.skip(reason="Unix-only test")

    for item in items:
        if "unix_only" in item.keywords and sys.platform == "win32":
            item.add_marker(skip_unix)


@pytest.fixture
def credentials() -> dict[str, str]:
    """Explicit username/password options."""
    return {"username": "rpcuser", "password": "s3cret"}


@pytest.fixture
def json_transport() -> Callable[..., httpx.MockTransport]:
    """Factory for a MockTransport answering every request with a fixed JSON body.

    Requests seen by the transport are appended to the returned transport's
    ``requests`` list.
    """

    def factory(
        body: Any,
        status_code: int = 200,
        content_type: str = "application/json",
    ) -> httpx.MockTransport:
        seen: list[httpx.Request] = []
        text = body if isinstance(body, str) else json.dumps(body)

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                status_code,
                content=text.encode("utf-8"),
                headers={"content-type": content_type},
            )

        transport = httpx.MockTransport(handler)
        transport.requests = seen  # type: ignore[attr-defined]
        return transport

    return factory
