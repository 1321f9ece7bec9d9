"""BDD step definitions for scrape features.

Scrapes run through the real HttpxQueryClient against an httpx mock
transport, so query encoding, response decoding and normalization are
exercised together.
"""

import pytest
from pytest_bdd import given, parsers, then, when
from tests.features.scrape.steps_helpers import ScrapeScenarioContext, run_async
from tests.helpers import make_payload

from cmexporter.adapters.http.client import HttpxQueryClient
from cmexporter.core.descriptors import bind
from cmexporter.core.models import ConnectionConfig
from cmexporter.core.query import scoped_expression
from cmexporter.core.scraper import ScraperModule


@pytest.fixture
def ctx() -> ScrapeScenarioContext:
    """Fresh scenario context for each test."""
    return ScrapeScenarioContext()


# === Given ===
@given(parsers.parse('a module "{name}" with the query "{query}"'))
def step_module(ctx: ScrapeScenarioContext, name: str, query: str) -> None:
    ctx.module_name = name
    ctx.queries.append((query, ctx.registry.gauge(name, "alerts_rate")))


@given(parsers.parse('a second query "{query}" named "{metric}"'))
def step_second_query(ctx: ScrapeScenarioContext, query: str, metric: str) -> None:
    ctx.queries.append((query, ctx.registry.gauge(ctx.module_name, metric)))


@given(parsers.parse('the module is scoped to cluster "{cluster}"'))
def step_scope(ctx: ScrapeScenarioContext, cluster: str) -> None:
    ctx.scope = cluster


@given(
    parsers.parse(
        "upstream answers the query with a series without metadata ending at {value:f}"
    )
)
def step_bare_series(ctx: ScrapeScenarioContext, value: float) -> None:
    query = ctx.queries[0][0]
    series = {"metadata": {}, "data": [{"timestamp": "t0", "value": value}]}
    ctx.answers[query] = make_payload(series)


@given(
    parsers.parse(
        'upstream answers the query for cluster "{cluster}" and entity "{entity}" '
        "with values {values}"
    )
)
def step_series(ctx: ScrapeScenarioContext, cluster: str, entity: str, values: str) -> None:
    query = ctx.queries[0][0]
    series = {
        "metadata": {
            "attributes": {"clusterDisplayName": cluster, "entityName": entity}
        },
        "data": [
            {"timestamp": f"t{i}", "value": float(v)}
            for i, v in enumerate(values.split(","))
        ],
    }
    ctx.answers[query] = make_payload(series)


@given(parsers.parse('upstream answers "{query}" with the body "{body}"'))
def step_raw_body(ctx: ScrapeScenarioContext, query: str, body: str) -> None:
    ctx.answers[query] = body


@given(parsers.parse("upstream answers every query with status {code:d}"))
def step_status(ctx: ScrapeScenarioContext, code: int) -> None:
    ctx.status_code = code


# === When ===
@when("the module is scraped")
def step_scrape(ctx: ScrapeScenarioContext, upstream_transport) -> None:
    module = ScraperModule(
        name=ctx.module_name,
        help=f"{ctx.module_name} metrics",
        bindings=bind(ctx.queries),
        scope=ctx.scope,
    )
    answers = {scoped_expression(q, ctx.scope): body for q, body in ctx.answers.items()}
    transport = upstream_transport(answers, status_code=ctx.status_code)
    config = ConnectionConfig(host="cm.test", username="admin", password="pw")

    async def scrape():
        async with HttpxQueryClient(transport=transport) as client:
            return await module.scrape(client, config, ctx.sink)

    ctx.outcome = run_async(scrape())


# === Then ===
@then(parsers.parse("the scrape reports {ok:d} successful and {failed:d} failed queries"))
def step_tally(ctx: ScrapeScenarioContext, ok: int, failed: int) -> None:
    assert ctx.outcome is not None
    assert (ctx.outcome.success_count, ctx.outcome.error_count) == (ok, failed)


@then(
    parsers.re(
        r'the sample "(?P<name>[^"]+)" has cluster "(?P<cluster>[^"]*)", '
        r'entity "(?P<entity>[^"]*)" and value (?P<value>[\d.]+)',
    ),
    converters={"value": float},
)
def step_sample(
    ctx: ScrapeScenarioContext, name: str, cluster: str, entity: str, value: float
) -> None:
    samples = [s for s in ctx.sink.samples if s.name == name]
    assert len(samples) == 1
    assert samples[0].labels == {"cluster": cluster, "entityName": entity}
    assert samples[0].value == value


@then("no samples are emitted")
def step_no_samples(ctx: ScrapeScenarioContext) -> None:
    assert len(ctx.sink) == 0
