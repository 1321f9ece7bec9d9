"""Core pipeline: models, ports, normalizer and scraper modules."""

from cmexporter.core.descriptors import DescriptorRegistry, bind
from cmexporter.core.errors import (
    CMExporterError,
    DuplicateDescriptorError,
    MalformedResponse,
    QueryFailure,
    ScrapeConfigError,
    TransportError,
    UpstreamError,
)
from cmexporter.core.models import (
    Aggregation,
    ConnectionConfig,
    MetricDescriptor,
    MetricSample,
    QueryBinding,
    RawSeriesRecord,
    ScrapeOutcome,
)
from cmexporter.core.normalize import normalize
from cmexporter.core.scraper import ScraperModule

__all__ = [
    "Aggregation",
    "CMExporterError",
    "ConnectionConfig",
    "DescriptorRegistry",
    "DuplicateDescriptorError",
    "MalformedResponse",
    "MetricDescriptor",
    "MetricSample",
    "QueryBinding",
    "QueryFailure",
    "RawSeriesRecord",
    "ScrapeConfigError",
    "ScrapeOutcome",
    "ScraperModule",
    "TransportError",
    "UpstreamError",
    "bind",
    "normalize",
]
