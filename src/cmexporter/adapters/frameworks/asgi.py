"""ASGI generic adapter for the exporter endpoints.

Provides a framework-agnostic ASGI application that can be served by any
ASGI server (uvicorn, hypercorn, daphne) without requiring FastAPI.

Endpoints:
    /metrics  - Prometheus text format, one scrape per request
    /logs     - NDJSON of the exporter's own log records (since, level)
    /health   - liveness probe
"""

import json
import logging
from collections.abc import Callable, Coroutine
from typing import Any
from urllib.parse import parse_qs

from cmexporter.adapters.frameworks.query_params import (
    _parse_level_param,
    _parse_since_param,
)
from cmexporter.core.encoding import ndjson, prometheus
from cmexporter.core.ports import LogStoragePort
from cmexporter.runtime.exporter import Exporter

logger = logging.getLogger(__name__)

# ASGI type aliases
Scope = dict[str, Any]
Receive = Callable[[], Coroutine[Any, Any, dict[str, Any]]]
Send = Callable[[dict[str, Any]], Coroutine[Any, Any, None]]
ASGIApp = Callable[[Scope, Receive, Send], Coroutine[Any, Any, None]]


def _parse_query_params(scope: Scope) -> dict[str, list[str]]:
    """Parse query string from ASGI scope into parameter dictionary.

    Returns empty dict if query_string is missing or empty.
    """
    query_string = scope.get("query_string", b"").decode(errors="replace")
    return parse_qs(query_string)


async def _send_response(send: Send, status: int, content_type: str, body: str) -> None:
    """Send an HTTP response with headers and body."""
    headers = [(b"content-type", content_type.encode())]
    await send({"type": "http.response.start", "status": status, "headers": headers})
    await send({"type": "http.response.body", "body": body.encode()})


async def _handle_endpoint(
    send: Send,
    endpoint_func: Callable[[], Coroutine[Any, Any, str]],
    content_type: str,
    log_message: str,
) -> None:
    """Execute an endpoint function with error handling and send response.

    Args:
        send: ASGI send callable for writing response.
        endpoint_func: Async function that returns response body.
        content_type: Content-Type header for success response.
        log_message: Message to log on error.
    """
    try:
        body = await endpoint_func()
        await _send_response(send, 200, content_type, body)
    except Exception:
        logger.exception(log_message)
        error_body = json.dumps({"error": "Internal Server Error"})
        await _send_response(send, 500, "application/json", error_body)


async def _handle_lifespan(
    receive: Receive,
    send: Send,
    on_shutdown: Callable[[], Coroutine[Any, Any, None]] | None,
) -> None:
    """Answer ASGI lifespan events, running on_shutdown before exit."""
    while True:
        message = await receive()
        if message["type"] == "lifespan.startup":
            await send({"type": "lifespan.startup.complete"})
        elif message["type"] == "lifespan.shutdown":
            if on_shutdown is not None:
                await on_shutdown()
            await send({"type": "lifespan.shutdown.complete"})
            return


def create_asgi_app(
    exporter: Exporter,
    log_storage: LogStoragePort | None = None,
    on_shutdown: Callable[[], Coroutine[Any, Any, None]] | None = None,
) -> ASGIApp:
    """Create an ASGI app with /metrics, /logs and /health endpoints.

    Args:
        exporter: Exporter that performs a scrape per /metrics request.
        log_storage: Storage with captured log records; /logs answers 404
            when omitted.
        on_shutdown: Coroutine function awaited on lifespan shutdown
            (e.g., closing the query client).

    Returns:
        ASGI application callable.
    """

    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await _handle_lifespan(receive, send, on_shutdown)
            return
        if scope["type"] != "http":
            return

        path = scope["path"]

        if path == "/metrics":
            await _handle_endpoint(
                send,
                exporter.render,
                prometheus.CONTENT_TYPE,
                "Error collecting metrics",
            )
        elif path == "/logs" and log_storage is not None:
            params = _parse_query_params(scope)
            since = _parse_since_param(params)
            level = _parse_level_param(params)
            await _handle_endpoint(
                send,
                lambda: ndjson.encode_logs(log_storage.read(since=since, level=level)),
                ndjson.CONTENT_TYPE,
                "Error encoding logs endpoint",
            )
        elif path == "/health":
            await _send_response(send, 200, "text/plain", "ok")
        else:
            await _send_response(send, 404, "text/plain", "Not Found")

    return app
