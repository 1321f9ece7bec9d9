"""Timeseries normalizer.

Flattens the upstream response shape::

    {"items": [{"timeSeries": [{"metadata": {...},
                                "data": [{"timestamp": ..., "value": ...}]}]}]}

into one RawSeriesRecord per series. Data points are assumed to arrive in
upstream order; the last point by position is the current value and no
sorting by timestamp is done.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from cmexporter.core.errors import MalformedResponse
from cmexporter.core.models import RawSeriesRecord

logger = logging.getLogger(__name__)

_CLUSTER_KEYS = ("clusterDisplayName", "clusterName")
_ENTITY_KEYS = ("entityName",)


def _lookup(metadata: Mapping[str, Any], keys: tuple[str, ...]) -> str:
    """Find the first non-empty identity value in attributes, then metadata."""
    attributes = metadata.get("attributes")
    sources = [attributes] if isinstance(attributes, Mapping) else []
    sources.append(metadata)
    for source in sources:
        for key in keys:
            value = source.get(key)
            if value:
                return str(value)
    return ""


def _last_value(data: list[Any]) -> float | None:
    """Return the value of the last data point, or None if it is not numeric."""
    point = data[-1]
    if not isinstance(point, Mapping):
        return None
    value = point.get("value")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _items(raw: Any) -> list[Any]:
    if not isinstance(raw, Mapping):
        raise MalformedResponse("response is not a JSON object")
    items = raw.get("items")
    if not isinstance(items, list):
        raise MalformedResponse("response has no 'items' list")
    return items


def normalize(raw: Any, default_cluster: str = "") -> Iterator[RawSeriesRecord]:
    """Yield one record per series that carries data.

    Args:
        raw: Decoded response from the timeseries endpoint.
        default_cluster: Cluster identity used when the series metadata
            does not name one (typically the query scope).

    Yields:
        RawSeriesRecord for every series whose last data point is numeric.
        Series with no data points yield nothing.

    Raises:
        MalformedResponse: If the response does not have the items/timeSeries
            structure. Raised before any record is yielded.
    """
    items = _items(raw)
    series_lists: list[list[Any]] = []
    for item in items:
        if not isinstance(item, Mapping):
            raise MalformedResponse("timeseries item is not an object")
        warnings = item.get("warnings") or []
        if not isinstance(warnings, list):
            raise MalformedResponse("'warnings' is not a list")
        for warning in warnings:
            logger.debug("Upstream query warning: %s", warning)
        series = item.get("timeSeries", [])
        if not isinstance(series, list):
            raise MalformedResponse("'timeSeries' is not a list")
        series_lists.append(series)

    return _records(series_lists, default_cluster)


def _records(
    series_lists: list[list[Any]], default_cluster: str
) -> Iterator[RawSeriesRecord]:
    for series_list in series_lists:
        for series in series_list:
            if not isinstance(series, Mapping):
                continue
            data = series.get("data") or []
            if not isinstance(data, list) or not data:
                continue
            metadata = series.get("metadata")
            if not isinstance(metadata, Mapping):
                metadata = {}
            value = _last_value(data)
            if value is None:
                logger.debug(
                    "Skipping series %s: last data point has no numeric value",
                    metadata.get("metricName", "<unnamed>"),
                )
                continue
            yield RawSeriesRecord(
                cluster_name=_lookup(metadata, _CLUSTER_KEYS) or default_cluster,
                entity_name=_lookup(metadata, _ENTITY_KEYS),
                value=value,
            )


def sum_records(records: Iterable[RawSeriesRecord]) -> float | None:
    """Sum record values, returning None when there are no records."""
    total: float | None = None
    for record in records:
        total = record.value if total is None else total + record.value
    return total
