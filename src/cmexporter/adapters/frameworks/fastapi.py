"""FastAPI adapter for the exporter endpoints."""

from fastapi import APIRouter, Query, Response

from cmexporter.core.config import VALID_LEVELS
from cmexporter.core.encoding import ndjson, prometheus
from cmexporter.core.ports import LogStoragePort
from cmexporter.runtime.exporter import Exporter


def create_exporter_router(
    exporter: Exporter,
    log_storage: LogStoragePort | None = None,
) -> APIRouter:
    """Create a FastAPI router with /metrics and /logs endpoints.

    Args:
        exporter: Exporter that performs a scrape per /metrics request.
        log_storage: Storage with captured log records; /logs is only
            mounted when given.

    Returns:
        APIRouter with the exporter endpoints configured.
    """
    router = APIRouter()

    @router.get("/metrics")
    async def get_metrics() -> Response:
        """Return metrics in Prometheus text format."""
        body = await exporter.render()
        return Response(content=body, media_type=prometheus.CONTENT_TYPE)

    if log_storage is not None:

        @router.get("/logs")
        async def get_logs(
            since: float = Query(default=0, ge=0),
            level: str | None = Query(default=None),
        ) -> Response:
            """Return captured exporter logs in NDJSON format.

            Args:
                since: Unix timestamp. Returns entries with timestamp > since.
                level: Optional level filter; unknown levels are ignored.
            """
            wanted = level.upper() if level and level.upper() in VALID_LEVELS else None
            body = await ndjson.encode_logs(log_storage.read(since=since, level=wanted))
            return Response(content=body, media_type=ndjson.CONTENT_TYPE)

    return router
