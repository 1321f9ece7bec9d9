"""httpx adapter implementing QueryClientPort."""

import json
from types import TracebackType
from typing import Any

import httpx

from cmexporter.core.errors import MalformedResponse, TransportError, UpstreamError
from cmexporter.core.models import ConnectionConfig
from cmexporter.core.query import timeseries_params, timeseries_url

DEFAULT_TIMEOUT = 10.0


class HttpxQueryClient:
    """Query client issuing authenticated GETs against the timeseries endpoint.

    One attempt per query, bounded by ``timeout``. The response is streamed
    inside a context manager so the connection is released on every exit
    path, including cancellation of the calling task.

    Args:
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (used to fake the upstream in tests).
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def fetch(
        self, config: ConnectionConfig, expression: str, scope: str | None = None
    ) -> dict[str, Any]:
        """Fetch and decode one timeseries query.

        Raises:
            TransportError: On timeout or connection failure.
            UpstreamError: On a non-success HTTP status.
            MalformedResponse: If the body is not a JSON object.
        """
        try:
            async with self._client.stream(
                "GET",
                timeseries_url(config),
                params=timeseries_params(expression, scope),
                auth=httpx.BasicAuth(config.username, config.password),
            ) as response:
                if not response.is_success:
                    raise UpstreamError(response.status_code, query=expression)
                body = await response.aread()
        except httpx.HTTPError as e:
            raise TransportError(
                f"{type(e).__name__}: {e}", query=expression
            ) from e

        try:
            payload = json.loads(body)
        except ValueError as e:
            raise MalformedResponse(f"invalid JSON: {e}", query=expression) from e
        if not isinstance(payload, dict):
            raise MalformedResponse("response is not a JSON object", query=expression)
        return payload

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    async def __aenter__(self) -> "HttpxQueryClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
