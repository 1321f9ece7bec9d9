"""Tests for the ZooKeeper query catalog."""

import pytest

from cmexporter.catalog.zookeeper import (
    AGGREGATE_METRICS,
    SERVICE_METRICS,
    build_zookeeper_module,
)
from cmexporter.core.descriptors import DescriptorRegistry
from cmexporter.core.errors import DuplicateDescriptorError
from cmexporter.core.models import SERIES_LABELS, Aggregation, ConnectionConfig
from cmexporter.core.ports import ScraperPort
from cmexporter.runtime.registry import ModuleRegistry
from tests.helpers import FakeQueryClient, make_payload, make_series


class TestCatalog:
    """Tests for the descriptor table."""

    @pytest.mark.integration
    def test_module_identity(self, registry: DescriptorRegistry) -> None:
        """The module is named zookeeper and satisfies ScraperPort."""
        module = build_zookeeper_module(registry)
        assert isinstance(module, ScraperPort)
        assert module.name == "zookeeper"
        assert module.help == "Collects ZooKeeper metrics from Cloudera Manager"
        assert module.version == 1.0

    @pytest.mark.integration
    def test_declares_every_query(self, registry: DescriptorRegistry) -> None:
        """One descriptor per catalog entry, all under cm_zookeeper_."""
        module = build_zookeeper_module(registry)
        names = [d.fq_name for d in module.describe()]

        assert len(names) == len(SERVICE_METRICS) + len(AGGREGATE_METRICS) == 14
        assert all(name.startswith("cm_zookeeper_") for name in names)
        assert "cm_zookeeper_alerts_rate" in names
        assert "cm_zookeeper_canary_duration_ms" in names
        assert "cm_zookeeper_total_alerts_rate_across_servers" in names

    @pytest.mark.integration
    def test_service_queries_filter_on_zookeeper(
        self, registry: DescriptorRegistry
    ) -> None:
        """Per-service queries target the ZooKeeper service category."""
        module = build_zookeeper_module(registry)
        per_series = [
            b for b in module.bindings if b.descriptor.aggregation is Aggregation.PER_SERIES
        ]
        assert len(per_series) == 12
        for binding in per_series:
            assert binding.expression.startswith("SELECT LAST(")
            assert 'serviceName="ZOOKEEPER"' in binding.expression
            assert binding.descriptor.label_names == SERIES_LABELS

    @pytest.mark.integration
    def test_aggregates_have_no_labels(self, registry: DescriptorRegistry) -> None:
        """Cross-cluster totals are single unlabeled gauges."""
        module = build_zookeeper_module(registry)
        aggregates = [
            b.descriptor for b in module.bindings if b.descriptor.aggregation is Aggregation.SUM
        ]
        assert [d.fq_name for d in aggregates] == [
            "cm_zookeeper_alerts_rate_across_servers",
            "cm_zookeeper_total_alerts_rate_across_servers",
        ]
        assert all(d.label_names == () for d in aggregates)

    @pytest.mark.integration
    def test_every_descriptor_has_help(self, registry: DescriptorRegistry) -> None:
        """No descriptor is exported with an empty help string."""
        module = build_zookeeper_module(registry)
        assert all(d.help_text for d in module.describe())

    @pytest.mark.integration
    def test_namespace_is_configurable(self) -> None:
        """The namespace prefix comes from the registry."""
        module = build_zookeeper_module(DescriptorRegistry(namespace="cloudera"))
        assert module.describe()[0].fq_name == "cloudera_zookeeper_alerts_rate"

    @pytest.mark.integration
    def test_building_twice_on_one_registry_fails(
        self, registry: DescriptorRegistry
    ) -> None:
        """Descriptor names stay unique within a registry."""
        build_zookeeper_module(registry)
        with pytest.raises(DuplicateDescriptorError):
            build_zookeeper_module(registry)


class TestScopedScrape:
    """Tests for scraping the catalog with a cluster scope."""

    @pytest.mark.integration
    async def test_scope_applies_to_service_queries_only(
        self, registry: DescriptorRegistry, config: ConnectionConfig
    ) -> None:
        """Service queries carry the scope; aggregates are sent unscoped."""
        module = build_zookeeper_module(registry, scope="C1")
        client = FakeQueryClient({b.expression: {"items": []} for b in module.bindings})

        await ModuleRegistry([module]).collect(client, config)

        scopes = {expression: scope for expression, scope in client.calls}
        for query, _, _ in SERVICE_METRICS:
            assert scopes[query] == "C1"
        for query, _, _ in AGGREGATE_METRICS:
            assert scopes[query] is None

    @pytest.mark.integration
    async def test_aggregate_sums_every_series(
        self, registry: DescriptorRegistry, config: ConnectionConfig
    ) -> None:
        """An aggregate emits one sample with the total of last values."""
        module = build_zookeeper_module(registry)
        answers = {b.expression: {"items": []} for b in module.bindings}
        answers[AGGREGATE_METRICS[0][0]] = make_payload(
            make_series(9.0, 1.5, cluster="C1"), make_series(2.0, cluster="C2")
        )

        result = await ModuleRegistry([module]).collect(FakeQueryClient(answers), config)

        assert [(s.name, s.value, s.labels) for s in result.samples] == [
            ("cm_zookeeper_alerts_rate_across_servers", 3.5, {})
        ]
