"""Descriptor registry and binding-table builders.

Descriptor tables are built once during process start. The registry rejects
duplicate fully qualified names as soon as they are registered, and freeze()
hands out immutable tuples that scraper modules hold by reference.
"""

from collections.abc import Iterable

from cmexporter.core.errors import DuplicateDescriptorError
from cmexporter.core.models import (
    SERIES_LABELS,
    Aggregation,
    MetricDescriptor,
    QueryBinding,
)


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """Join non-empty name parts with underscores."""
    return "_".join(part for part in (namespace, subsystem, name) if part)


def default_help(name: str) -> str:
    """Derive a readable help string from a metric name."""
    return name.upper().replace("_", " ")


class DescriptorRegistry:
    """Registration-time builder for metric descriptors.

    Args:
        namespace: Prefix shared by every metric (e.g., "cm").
    """

    def __init__(self, namespace: str = "cm") -> None:
        self.namespace = namespace
        self._descriptors: dict[str, MetricDescriptor] = {}
        self._frozen = False

    def register(self, descriptor: MetricDescriptor) -> MetricDescriptor:
        """Add a descriptor, rejecting duplicate names."""
        if self._frozen:
            raise RuntimeError("descriptor registry is frozen")
        if descriptor.fq_name in self._descriptors:
            raise DuplicateDescriptorError(descriptor.fq_name)
        self._descriptors[descriptor.fq_name] = descriptor
        return descriptor

    def gauge(
        self,
        subsystem: str,
        name: str,
        help_text: str = "",
        aggregation: Aggregation = Aggregation.PER_SERIES,
    ) -> MetricDescriptor:
        """Create and register a gauge descriptor.

        PER_SERIES descriptors carry the cluster and entity labels; SUM
        descriptors carry none.

        Args:
            subsystem: Module-level name part (e.g., "zookeeper").
            name: Metric name within the subsystem.
            help_text: Help string; derived from the name when empty.
            aggregation: How records become samples.

        Returns:
            The registered descriptor.
        """
        labels = SERIES_LABELS if aggregation is Aggregation.PER_SERIES else ()
        return self.register(
            MetricDescriptor(
                fq_name=build_fq_name(self.namespace, subsystem, name),
                help_text=help_text or default_help(name),
                label_names=labels,
                aggregation=aggregation,
            )
        )

    def freeze(self) -> tuple[MetricDescriptor, ...]:
        """Stop accepting registrations and return all descriptors."""
        self._frozen = True
        return tuple(self._descriptors.values())

    def __contains__(self, fq_name: object) -> bool:
        return fq_name in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)


def bind(pairs: Iterable[tuple[str, MetricDescriptor]]) -> tuple[QueryBinding, ...]:
    """Build an immutable binding table from (expression, descriptor) pairs."""
    return tuple(QueryBinding(expression, descriptor) for expression, descriptor in pairs)


def check_unique(descriptors: Iterable[MetricDescriptor]) -> None:
    """Raise DuplicateDescriptorError if two descriptors share a name."""
    seen: set[str] = set()
    for descriptor in descriptors:
        if descriptor.fq_name in seen:
            raise DuplicateDescriptorError(descriptor.fq_name)
        seen.add(descriptor.fq_name)
