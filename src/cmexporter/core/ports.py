"""Port interfaces for the scrape pipeline.

These protocols define the contracts that adapters and scraper modules must
implement. The core pipeline depends only on these interfaces, not on
concrete implementations.
"""

from collections.abc import AsyncIterable
from typing import Any, Protocol, runtime_checkable

from cmexporter.core.models import (
    ConnectionConfig,
    LogEntry,
    MetricDescriptor,
    MetricSample,
    ScrapeOutcome,
)


@runtime_checkable
class QueryClientPort(Protocol):
    """Port for executing one timeseries query against the upstream manager.

    Examples: HttpxQueryClient, or a fake returning canned payloads in tests.
    """

    async def fetch(
        self, config: ConnectionConfig, expression: str, scope: str | None = None
    ) -> dict[str, Any]:
        """Fetch the decoded JSON response for one query.

        Args:
            config: Upstream connection details.
            expression: Query expression in the manager's query language.
            scope: Optional cluster name to restrict the query to.

        Returns:
            The decoded response object.

        Raises:
            QueryFailure: On transport, status or decoding failures.
        """
        ...


@runtime_checkable
class SampleSinkPort(Protocol):
    """Port for the output channel scraper modules write samples to.

    Examples: SampleChannel, InMemorySampleSink.
    """

    async def send(self, sample: MetricSample) -> None:
        """Write one sample, suspending while the consumer catches up."""
        ...


@runtime_checkable
class ScraperPort(Protocol):
    """Contract every scraper module satisfies.

    Any object with this surface can be registered with a ModuleRegistry
    without changes to the pipeline.
    """

    @property
    def name(self) -> str: ...

    @property
    def help(self) -> str: ...

    @property
    def version(self) -> float: ...

    def describe(self) -> tuple[MetricDescriptor, ...]:
        """Return every descriptor this module can emit, independent of data."""
        ...

    async def scrape(
        self,
        client: QueryClientPort,
        config: ConnectionConfig,
        sink: SampleSinkPort,
    ) -> ScrapeOutcome:
        """Run all queries and write samples to the sink."""
        ...


@runtime_checkable
class LogStoragePort(Protocol):
    """Port for storing the exporter's own log records.

    Examples: RingBufferLogStorage.
    """

    def write(self, entry: LogEntry) -> None:
        """Write a log entry to storage."""
        ...

    def read(
        self, since: float = 0, level: str | None = None
    ) -> AsyncIterable[LogEntry]:
        """Read log entries since the given timestamp.

        Args:
            since: Unix timestamp. Returns entries with timestamp > since.
            level: Optional level filter (e.g., "ERROR").

        Returns:
            Async iterable of LogEntry objects, ordered by timestamp ascending.
        """
        ...
