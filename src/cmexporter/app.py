"""Application wiring: settings, query client, modules and ASGI app.

Run with:
    uvicorn cmexporter.app:create_app_from_env --factory --port 9200

Environment variables are documented on ExporterSettings.
"""

import httpx

from cmexporter.adapters.frameworks.asgi import ASGIApp, create_asgi_app
from cmexporter.adapters.http.client import HttpxQueryClient
from cmexporter.adapters.logging import configure_logging
from cmexporter.adapters.storage.ring_buffer import RingBufferLogStorage
from cmexporter.catalog.zookeeper import build_zookeeper_module
from cmexporter.core.config import ExporterSettings
from cmexporter.core.descriptors import DescriptorRegistry
from cmexporter.core.ports import QueryClientPort
from cmexporter.runtime.exporter import Exporter
from cmexporter.runtime.registry import ModuleRegistry


def build_exporter(settings: ExporterSettings, client: QueryClientPort) -> Exporter:
    """Build descriptor tables and modules once, bound to the given client.

    Args:
        settings: Process settings.
        client: Query client shared by every module.

    Returns:
        Exporter ready to serve scrapes.
    """
    descriptors = DescriptorRegistry(namespace=settings.namespace)
    modules = [
        build_zookeeper_module(descriptors, scope=settings.cluster_scope or None),
    ]
    descriptors.freeze()
    registry = ModuleRegistry(modules, max_concurrency=settings.max_concurrency)
    return Exporter(
        registry=registry,
        client=client,
        config=settings.connection(),
        scrape_timeout=settings.scrape_timeout,
    )


def create_app(
    settings: ExporterSettings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ASGIApp:
    """Create the exporter ASGI app with logging configured.

    Args:
        settings: Process settings.
        transport: Optional httpx transport for the upstream connection.
    """
    log_storage = RingBufferLogStorage(max_size=settings.log_buffer_size)
    configure_logging(settings.log_level, log_storage)
    client = HttpxQueryClient(timeout=settings.query_timeout, transport=transport)
    return create_asgi_app(
        build_exporter(settings, client),
        log_storage=log_storage,
        on_shutdown=client.aclose,
    )


def create_app_from_env() -> ASGIApp:
    """Create the exporter ASGI app from environment variables."""
    return create_app(ExporterSettings.from_env())
