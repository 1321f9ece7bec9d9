"""ZooKeeper service queries for the Cloudera Manager timeseries API."""

from cmexporter.core.descriptors import DescriptorRegistry, bind
from cmexporter.core.models import Aggregation
from cmexporter.core.scraper import ScraperModule

SCRAPER_NAME = "zookeeper"
SCRAPER_HELP = "Collects ZooKeeper metrics from Cloudera Manager"
SCRAPER_VERSION = 1.0

_SERVICE_FILTER = 'WHERE category="SERVICE" AND serviceName="ZOOKEEPER"'


def _service_query(metric: str) -> str:
    return f"SELECT LAST({metric}) {_SERVICE_FILTER}"


# (query, metric name, help)
SERVICE_METRICS: tuple[tuple[str, str, str], ...] = (
    (
        _service_query("alerts_rate"),
        "alerts_rate",
        "Number of ZooKeeper alerts (events per second)",
    ),
    (
        _service_query("canary_duration"),
        "canary_duration_ms",
        "Duration of the last or currently running canary job (ms)",
    ),
    (
        _service_query("current_epoch_rate"),
        "current_epoch_rate",
        "The current epoch (epoch per second)",
    ),
    (_service_query("current_xid"), "current_xid", "The current ZooKeeper XID"),
    (
        _service_query("events_critical_rate"),
        "events_critical_rate",
        "The number of critical events (events per second)",
    ),
    (
        _service_query("events_important_rate"),
        "events_important_rate",
        "The number of important events (events per second)",
    ),
    (
        _service_query("events_informational_rate"),
        "events_informational_rate",
        "The number of informational events (events per second)",
    ),
    (
        _service_query("health_bad_rate"),
        "health_bad_rate",
        "Percentage of Time with Bad Health (s/s)",
    ),
    (
        _service_query("health_concerning_rate"),
        "health_concerning_rate",
        "Percentage of Time with Concerning Health (s/s)",
    ),
    (
        _service_query("health_disabled_rate"),
        "health_disabled_rate",
        "Percentage of Time with Disabled Health (s/s)",
    ),
    (
        _service_query("health_good_rate"),
        "health_good_rate",
        "Percentage of Time with Good Health (s/s)",
    ),
    (
        _service_query("health_unknown_rate"),
        "health_unknown_rate",
        "Percentage of Time with Unknown Health (s/s)",
    ),
)

# Cross-cluster totals, exposed without labels.
AGGREGATE_METRICS: tuple[tuple[str, str, str], ...] = (
    (
        "SELECT LAST(alerts_rate_across_clusters)",
        "alerts_rate_across_servers",
        "Alerts rate aggregated across all clusters",
    ),
    (
        "SELECT LAST(total_alerts_rate_across_clusters)",
        "total_alerts_rate_across_servers",
        "Total alerts rate aggregated across all clusters",
    ),
)


def build_zookeeper_module(
    registry: DescriptorRegistry,
    scope: str | None = None,
    max_concurrency: int = 1,
) -> ScraperModule:
    """Register ZooKeeper descriptors and return the module scraping them."""
    pairs = [
        (query, registry.gauge(SCRAPER_NAME, name, help_text))
        for query, name, help_text in SERVICE_METRICS
    ]
    pairs.extend(
        (query, registry.gauge(SCRAPER_NAME, name, help_text, Aggregation.SUM))
        for query, name, help_text in AGGREGATE_METRICS
    )
    return ScraperModule(
        name=SCRAPER_NAME,
        help=SCRAPER_HELP,
        bindings=bind(pairs),
        version=SCRAPER_VERSION,
        scope=scope,
        max_concurrency=max_concurrency,
    )
