"""cmexporter: Prometheus exporter for the Cloudera Manager timeseries API."""

from cmexporter.adapters.channels import InMemorySampleSink, SampleChannel
from cmexporter.adapters.http.client import HttpxQueryClient
from cmexporter.core import (
    Aggregation,
    ConnectionConfig,
    DescriptorRegistry,
    MetricDescriptor,
    MetricSample,
    QueryBinding,
    RawSeriesRecord,
    ScrapeOutcome,
    ScraperModule,
    bind,
    normalize,
)
from cmexporter.core.config import ExporterSettings
from cmexporter.runtime import Exporter, ModuleRegistry

__version__ = "0.1.0"

__all__ = [
    "Aggregation",
    "ConnectionConfig",
    "DescriptorRegistry",
    "Exporter",
    "ExporterSettings",
    "HttpxQueryClient",
    "InMemorySampleSink",
    "MetricDescriptor",
    "MetricSample",
    "ModuleRegistry",
    "QueryBinding",
    "RawSeriesRecord",
    "SampleChannel",
    "ScrapeOutcome",
    "ScraperModule",
    "bind",
    "normalize",
]
