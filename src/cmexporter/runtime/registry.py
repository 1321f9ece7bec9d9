"""Module registry: runs scraper modules and gathers their samples.

This is the boundary between scraper modules and the exposition layer. It
owns the module list, validates descriptor uniqueness at construction
(describe phase) and runs every module concurrently on each scrape
(collect phase), multiplexing their samples through one SampleChannel.
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from cmexporter.adapters.channels import SampleChannel
from cmexporter.core.descriptors import check_unique
from cmexporter.core.errors import DuplicateDescriptorError, ScrapeConfigError
from cmexporter.core.models import (
    ConnectionConfig,
    MetricDescriptor,
    MetricSample,
    ScrapeOutcome,
)
from cmexporter.core.ports import QueryClientPort, ScraperPort

logger = logging.getLogger(__name__)


@dataclass
class CollectResult:
    """Everything gathered during one collect call."""

    descriptors: tuple[MetricDescriptor, ...]
    samples: list[MetricSample] = field(default_factory=list)
    outcomes: list[ScrapeOutcome] = field(default_factory=list)
    failed_modules: list[str] = field(default_factory=list)
    timed_out: bool = False


class ModuleRegistry:
    """Owns the scraper modules and runs them for each scrape.

    Args:
        modules: Scraper modules; names and descriptor names must be unique.
        max_concurrency: Number of modules scraped at once.
        channel_size: Capacity of the shared sample channel.

    Raises:
        DuplicateDescriptorError: If two modules share a name or two
            descriptors share a fully qualified name.
    """

    def __init__(
        self,
        modules: Sequence[ScraperPort],
        max_concurrency: int = 4,
        channel_size: int = 1024,
    ) -> None:
        names: set[str] = set()
        for module in modules:
            if module.name in names:
                raise DuplicateDescriptorError(module.name)
            names.add(module.name)

        descriptors = tuple(d for module in modules for d in module.describe())
        check_unique(descriptors)

        self._modules = tuple(modules)
        self._descriptors = descriptors
        self._declared = frozenset(d.fq_name for d in descriptors)
        self._max_concurrency = max(1, max_concurrency)
        self._channel_size = channel_size

    @property
    def modules(self) -> tuple[ScraperPort, ...]:
        return self._modules

    def describe(self) -> tuple[MetricDescriptor, ...]:
        """Return every descriptor any registered module can emit."""
        return self._descriptors

    async def collect(
        self,
        client: QueryClientPort,
        config: ConnectionConfig,
        timeout: float | None = None,
    ) -> CollectResult:
        """Scrape every module and return the gathered samples.

        A module that fails with ScrapeConfigError or any other error is
        logged and skipped; the remaining modules still contribute.
        When the deadline expires, samples gathered so far are returned
        with ``timed_out`` set.

        Args:
            client: Query client shared by all modules.
            config: Upstream connection details.
            timeout: Deadline for the whole scrape in seconds, or None.

        Returns:
            CollectResult with descriptors, samples and per-module outcomes.
        """
        result = CollectResult(descriptors=self._descriptors)
        channel = SampleChannel(maxsize=self._channel_size)
        semaphore = asyncio.Semaphore(self._max_concurrency)
        consumer = asyncio.create_task(self._drain(channel, result))

        async def run(module: ScraperPort) -> None:
            async with semaphore:
                try:
                    outcome = await module.scrape(client, config, channel)
                except ScrapeConfigError as e:
                    logger.warning("Module %s could not scrape: %s", module.name, e)
                    result.failed_modules.append(module.name)
                    return
                except Exception:
                    logger.exception("Module %s failed during scrape", module.name)
                    result.failed_modules.append(module.name)
                    return
            result.outcomes.append(outcome)

        try:
            async with asyncio.timeout(timeout):
                async with asyncio.TaskGroup() as group:
                    for module in self._modules:
                        group.create_task(run(module))
        except TimeoutError:
            result.timed_out = True
            logger.warning(
                "Scrape deadline of %ss exceeded; returning partial results", timeout
            )
        finally:
            await channel.close()
            await consumer

        return result

    async def _drain(self, channel: SampleChannel, result: CollectResult) -> None:
        async for sample in channel:
            if sample.name not in self._declared:
                logger.warning("Dropping sample for undeclared metric %s", sample.name)
                continue
            result.samples.append(sample)
