"""Core domain models for the exporter pipeline."""

import enum
from dataclasses import dataclass, field

from cmexporter.core.errors import ScrapeConfigError

SERIES_LABELS = ("cluster", "entityName")


class Aggregation(enum.Enum):
    """How a descriptor turns normalized records into samples.

    PER_SERIES emits one sample per record labeled by cluster and entity.
    SUM emits a single unlabeled sample holding the total of all records.
    """

    PER_SERIES = "per_series"
    SUM = "sum"


@dataclass(frozen=True)
class ConnectionConfig:
    """Connection details for the upstream manager.

    Attributes:
        host: Manager hostname or address.
        port: Manager API port.
        api_version: API version path segment (e.g., v19).
        username: Basic auth user.
        password: Basic auth password.
    """

    host: str
    port: int = 7180
    api_version: str = "v19"
    username: str = ""
    password: str = field(default="", repr=False)

    def validate(self) -> None:
        """Raise ScrapeConfigError if no query could ever succeed."""
        if not self.host:
            raise ScrapeConfigError("upstream host is empty")
        if not 0 < self.port < 65536:
            raise ScrapeConfigError(f"upstream port out of range: {self.port}")
        if not self.api_version:
            raise ScrapeConfigError("upstream API version is empty")

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}/api/{self.api_version}"


@dataclass(frozen=True)
class MetricDescriptor:
    """Static schema of one exposed metric family.

    Attributes:
        fq_name: Fully qualified metric name, unique across all modules.
        help_text: Help string shown in the exposition.
        label_names: Ordered label names.
        aggregation: How records become samples.
    """

    fq_name: str
    help_text: str
    label_names: tuple[str, ...] = SERIES_LABELS
    aggregation: Aggregation = Aggregation.PER_SERIES

    def sample(
        self,
        value: float,
        label_values: tuple[str, ...] = (),
    ) -> "MetricSample":
        """Create a sample for this descriptor.

        Raises:
            ValueError: If the label value count does not match the schema.
        """
        if len(label_values) != len(self.label_names):
            raise ValueError(
                f"{self.fq_name} expects {len(self.label_names)} label values, "
                f"got {len(label_values)}"
            )
        return MetricSample(
            descriptor=self,
            value=float(value),
            label_values=tuple(label_values),
        )


@dataclass(frozen=True)
class QueryBinding:
    """A query expression paired with the descriptor it populates."""

    expression: str
    descriptor: MetricDescriptor


@dataclass(frozen=True)
class RawSeriesRecord:
    """One normalized upstream series.

    Attributes:
        cluster_name: Cluster identity, empty when it could not be determined.
        entity_name: Entity identity, empty for aggregate series.
        value: Value of the last data point.
    """

    cluster_name: str
    entity_name: str
    value: float


@dataclass(frozen=True)
class MetricSample:
    """A single gauge observation emitted during a scrape.

    Attributes:
        descriptor: Descriptor the sample belongs to.
        value: The observed value.
        label_values: Label values in descriptor order.
    """

    descriptor: MetricDescriptor
    value: float
    label_values: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.descriptor.fq_name

    @property
    def labels(self) -> dict[str, str]:
        return dict(zip(self.descriptor.label_names, self.label_values, strict=True))


@dataclass
class ScrapeOutcome:
    """Success and error tally for one module scrape."""

    module: str
    success_count: int = 0
    error_count: int = 0

    @property
    def total(self) -> int:
        return self.success_count + self.error_count


@dataclass(frozen=True)
class LogEntry:
    """A structured log entry captured from the exporter's own logging.

    Attributes:
        timestamp: Unix timestamp in seconds.
        level: Log level (e.g., INFO, ERROR, DEBUG).
        message: The log message.
        attributes: Additional structured fields.
    """

    timestamp: float
    level: str
    message: str
    attributes: dict[str, str | int | float | bool] = field(default_factory=dict)
