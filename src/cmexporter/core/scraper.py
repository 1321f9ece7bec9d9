"""Generic scrape-and-emit pipeline shared by every monitored service.

A ScraperModule is parameterized by a binding table: each binding pairs one
query expression with the descriptor it populates. Scraping fetches every
query, normalizes the response and writes samples to an output sink. A
failing query is counted and skipped; it never aborts the module's scrape.
"""

import asyncio
import logging
from collections.abc import Sequence

from cmexporter.core.errors import QueryFailure
from cmexporter.core.models import (
    Aggregation,
    ConnectionConfig,
    MetricDescriptor,
    MetricSample,
    QueryBinding,
    RawSeriesRecord,
    ScrapeOutcome,
)
from cmexporter.core.normalize import normalize, sum_records
from cmexporter.core.ports import QueryClientPort, SampleSinkPort

logger = logging.getLogger(__name__)


def build_samples(
    descriptor: MetricDescriptor, records: Sequence[RawSeriesRecord]
) -> list[MetricSample]:
    """Turn normalized records into samples for one descriptor.

    PER_SERIES descriptors get one sample per distinct (cluster, entity)
    pair; when several series share a pair the last one wins. SUM
    descriptors get a single unlabeled sample with the total, or nothing
    when there are no records.
    """
    if descriptor.aggregation is Aggregation.SUM:
        total = sum_records(records)
        if total is None:
            return []
        return [descriptor.sample(total)]

    by_labels: dict[tuple[str, str], float] = {}
    for record in records:
        key = (record.cluster_name, record.entity_name)
        if key in by_labels:
            logger.debug(
                "Duplicate series %s%s: keeping the last value", descriptor.fq_name, key
            )
        by_labels[key] = record.value
    return [descriptor.sample(value, key) for key, value in by_labels.items()]


class ScraperModule:
    """Scraper for one monitored service, driven by its binding table.

    Args:
        name: Unique module name (e.g., "zookeeper").
        help: One-line description of what the module collects.
        bindings: Ordered (expression, descriptor) bindings.
        version: Arbitrary module version.
        scope: Optional cluster name every query is restricted to.
        max_concurrency: Number of bindings fetched at once. 1 runs them
            sequentially in declared order.
    """

    def __init__(
        self,
        name: str,
        help: str,
        bindings: Sequence[QueryBinding],
        version: float = 1.0,
        scope: str | None = None,
        max_concurrency: int = 1,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._name = name
        self._help = help
        self._version = version
        self._bindings = tuple(bindings)
        self._scope = scope or None
        self._max_concurrency = max_concurrency
        self._descriptors = tuple(
            {b.descriptor.fq_name: b.descriptor for b in self._bindings}.values()
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def help(self) -> str:
        return self._help

    @property
    def version(self) -> float:
        return self._version

    @property
    def bindings(self) -> tuple[QueryBinding, ...]:
        return self._bindings

    def describe(self) -> tuple[MetricDescriptor, ...]:
        """Return every descriptor this module can emit."""
        return self._descriptors

    async def scrape(
        self,
        client: QueryClientPort,
        config: ConnectionConfig,
        sink: SampleSinkPort,
    ) -> ScrapeOutcome:
        """Run every binding and write the resulting samples to the sink.

        Args:
            client: Query client used for the upstream requests.
            config: Upstream connection details.
            sink: Output channel for samples.

        Returns:
            Tally of successful and failed queries.

        Raises:
            ScrapeConfigError: If the connection config is unusable.
            asyncio.CancelledError: If the scrape is cancelled. Samples
                already written stay written.
        """
        config.validate()
        logger.debug("Executing %s metrics scraper", self._name)
        outcome = ScrapeOutcome(module=self._name)

        try:
            if self._max_concurrency == 1:
                for binding in self._bindings:
                    # Checkpoint: a pending cancel stops us before the next query.
                    await asyncio.sleep(0)
                    await self._run_binding(client, config, sink, binding, outcome)
            else:
                await self._run_concurrently(client, config, sink, outcome)
        except asyncio.CancelledError:
            logger.info(
                "%s scraper cancelled after %d queries: %d successful, %d errors",
                self._name,
                outcome.total,
                outcome.success_count,
                outcome.error_count,
            )
            raise

        logger.info(
            "%s scraper: %d queries run, %d successful, %d errors",
            self._name,
            outcome.total,
            outcome.success_count,
            outcome.error_count,
        )
        return outcome

    async def _run_concurrently(
        self,
        client: QueryClientPort,
        config: ConnectionConfig,
        sink: SampleSinkPort,
        outcome: ScrapeOutcome,
    ) -> None:
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def guarded(binding: QueryBinding) -> None:
            async with semaphore:
                await self._run_binding(client, config, sink, binding, outcome)

        async with asyncio.TaskGroup() as group:
            for binding in self._bindings:
                group.create_task(guarded(binding))

    async def _run_binding(
        self,
        client: QueryClientPort,
        config: ConnectionConfig,
        sink: SampleSinkPort,
        binding: QueryBinding,
        outcome: ScrapeOutcome,
    ) -> None:
        """Fetch, normalize and emit one binding, recording the outcome."""
        # Cross-cluster aggregates are never restricted to the module scope.
        scope = None if binding.descriptor.aggregation is Aggregation.SUM else self._scope
        try:
            raw = await client.fetch(config, binding.expression, scope)
            records = list(normalize(raw, default_cluster=scope or ""))
        except QueryFailure as e:
            outcome.error_count += 1
            logger.debug(
                "Query for %s failed (%s): %s",
                binding.descriptor.fq_name,
                e.kind.value,
                e,
            )
            return

        for sample in build_samples(binding.descriptor, records):
            await sink.send(sample)
        outcome.success_count += 1
