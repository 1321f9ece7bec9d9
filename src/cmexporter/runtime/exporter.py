"""Exporter service tying the registry, query client and encoder together."""

import logging

from cmexporter.core.encoding.prometheus import encode_metrics
from cmexporter.core.models import ConnectionConfig
from cmexporter.core.ports import QueryClientPort
from cmexporter.runtime.registry import CollectResult, ModuleRegistry

logger = logging.getLogger(__name__)


class Exporter:
    """Runs one scrape per exposition request.

    Args:
        registry: Registered scraper modules.
        client: Query client shared by every module.
        config: Upstream connection details.
        scrape_timeout: Deadline for one scrape in seconds.
    """

    def __init__(
        self,
        registry: ModuleRegistry,
        client: QueryClientPort,
        config: ConnectionConfig,
        scrape_timeout: float | None = 30.0,
    ) -> None:
        self.registry = registry
        self.client = client
        self.config = config
        self.scrape_timeout = scrape_timeout

    async def collect(self) -> CollectResult:
        """Scrape all modules under the configured deadline."""
        result = await self.registry.collect(
            self.client, self.config, timeout=self.scrape_timeout
        )
        logger.debug(
            "Scrape finished: %d samples from %d modules (%d failed)",
            len(result.samples),
            len(result.outcomes),
            len(result.failed_modules),
        )
        return result

    async def render(self) -> str:
        """Scrape all modules and encode the samples in Prometheus text format."""
        result = await self.collect()
        return encode_metrics(result.descriptors, result.samples)
