"""Shared test fixtures for all test modules."""

import json
import logging
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from cmexporter.core.descriptors import DescriptorRegistry
from cmexporter.core.models import ConnectionConfig


@pytest.fixture
def config() -> ConnectionConfig:
    """Connection config pointing at a fake upstream."""
    return ConnectionConfig(
        host="cm.test", port=7180, api_version="v19", username="admin", password="pw"
    )


@pytest.fixture
def registry() -> DescriptorRegistry:
    """Empty descriptor registry with the default namespace."""
    return DescriptorRegistry(namespace="cm")


@pytest.fixture
def upstream_transport() -> Callable[..., httpx.MockTransport]:
    """Factory for an httpx.MockTransport answering timeseries queries.

    Usage:
        transport = upstream_transport({"SELECT LAST(x)": payload})
        transport = upstream_transport({}, status_code=500)

    Requests are recorded on ``transport.requests``. Queries without an
    answer get an empty items list.
    """

    def _factory(
        answers: dict[str, Any], status_code: int = 200
    ) -> httpx.MockTransport:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if status_code != 200:
                return httpx.Response(status_code, text="upstream failure")
            query = request.url.params.get("query", "")
            body = answers.get(query, {"items": []})
            if isinstance(body, str):
                return httpx.Response(200, text=body)
            return httpx.Response(200, content=json.dumps(body).encode())

        transport = httpx.MockTransport(handler)
        transport.requests = requests  # type: ignore[attr-defined]
        return transport

    return _factory


@pytest.fixture
def asgi_test_client():
    """Factory fixture that creates an httpx.AsyncClient for ASGI testing.

    Usage:
        async with asgi_test_client(app) as client:
            response = await client.get("/metrics")
    """

    def _get_client(app):
        """Return an AsyncClient context manager for the given app."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        )

    return _get_client


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo configure_logging() so later tests see propagated records."""
    logger = logging.getLogger("cmexporter")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
