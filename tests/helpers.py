"""Payload builders and fakes shared by the test suite."""

import asyncio
from typing import Any

from cmexporter.core.models import ConnectionConfig


def make_series(
    *values: float | None,
    cluster: str | None = None,
    entity: str | None = None,
) -> dict[str, Any]:
    """Build one upstream series with one data point per value."""
    attributes: dict[str, str] = {}
    if cluster is not None:
        attributes["clusterDisplayName"] = cluster
    if entity is not None:
        attributes["entityName"] = entity
    return {
        "metadata": {"metricName": "m", "attributes": attributes},
        "data": [
            {"timestamp": f"2025-01-09T00:00:0{i}Z", "value": value}
            for i, value in enumerate(values)
        ],
    }


def make_payload(*series: dict[str, Any]) -> dict[str, Any]:
    """Wrap series in the upstream items/timeSeries envelope."""
    return {"items": [{"timeSeries": list(series)}]}


class FakeQueryClient:
    """QueryClientPort fake answering from a dict keyed by expression.

    Values may be payload dicts or exceptions to raise. Every call is
    recorded as (expression, scope).
    """

    def __init__(
        self,
        answers: dict[str, Any],
        delay: float = 0.0,
    ) -> None:
        self.answers = answers
        self.delay = delay
        self.calls: list[tuple[str, str | None]] = []

    async def fetch(
        self, config: ConnectionConfig, expression: str, scope: str | None = None
    ) -> dict[str, Any]:
        self.calls.append((expression, scope))
        if self.delay:
            await asyncio.sleep(self.delay)
        answer = self.answers[expression]
        if isinstance(answer, BaseException):
            raise answer
        return answer


