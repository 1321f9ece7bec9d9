"""Per-service binding tables."""

from cmexporter.catalog.zookeeper import build_zookeeper_module

__all__ = ["build_zookeeper_module"]
