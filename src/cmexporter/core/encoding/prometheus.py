"""Prometheus text exposition encoder (format version 0.0.4)."""

import math
from collections.abc import Iterable

from cmexporter.core.models import MetricDescriptor, MetricSample

CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


def _escape_help(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\n", "\\n")


def _escape_label_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def _format_value(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return repr(float(value))


def _format_labels(sample: MetricSample) -> str:
    if not sample.label_values:
        return ""
    pairs = ",".join(
        f'{name}="{_escape_label_value(value)}"'
        for name, value in zip(
            sample.descriptor.label_names, sample.label_values, strict=True
        )
    )
    return "{" + pairs + "}"


def encode_metrics(
    descriptors: Iterable[MetricDescriptor], samples: Iterable[MetricSample]
) -> str:
    """Encode samples grouped by descriptor into Prometheus text format.

    Families are written in descriptor order; descriptors without samples
    are left out. Samples whose descriptor is not in ``descriptors`` are
    ignored.

    Args:
        descriptors: Declared descriptors, in exposition order.
        samples: Samples collected during the scrape.

    Returns:
        Prometheus exposition text. Empty string if there are no samples.
    """
    grouped: dict[str, list[MetricSample]] = {d.fq_name: [] for d in descriptors}
    help_by_name = {d.fq_name: d.help_text for d in descriptors}
    for sample in samples:
        if sample.name in grouped:
            grouped[sample.name].append(sample)

    lines: list[str] = []
    for name, family in grouped.items():
        if not family:
            continue
        lines.append(f"# HELP {name} {_escape_help(help_by_name[name])}")
        lines.append(f"# TYPE {name} gauge")
        for sample in family:
            lines.append(f"{name}{_format_labels(sample)} {_format_value(sample.value)}")

    if not lines:
        return ""

    return "\n".join(lines) + "\n"
