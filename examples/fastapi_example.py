"""Example FastAPI application mounting the exporter router.

Run with:
    CM_HOST=cm.example.com uvicorn examples.fastapi_example:app

Endpoints:
    /metrics              - Prometheus text format, one scrape per request
    /logs                 - NDJSON of the exporter's own logs
    /logs?since=<ts>      - NDJSON logs since timestamp
    /logs?level=<level>   - NDJSON logs filtered by level (INFO, ERROR, etc.)
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from cmexporter.adapters.frameworks.fastapi import create_exporter_router
from cmexporter.adapters.http.client import HttpxQueryClient
from cmexporter.adapters.logging import configure_logging
from cmexporter.adapters.storage.ring_buffer import RingBufferLogStorage
from cmexporter.app import build_exporter
from cmexporter.core.config import ExporterSettings

settings = ExporterSettings.from_env()
log_storage = RingBufferLogStorage(max_size=settings.log_buffer_size)
configure_logging(settings.log_level, log_storage)
client = HttpxQueryClient(timeout=settings.query_timeout)
exporter = build_exporter(settings, client)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await client.aclose()


app = FastAPI(title="Cloudera Manager Exporter", lifespan=lifespan)
app.include_router(create_exporter_router(exporter, log_storage))


@app.get("/")
async def root() -> dict[str, str]:
    """Point at the exporter endpoints."""
    return {"metrics": "/metrics", "logs": "/logs"}
