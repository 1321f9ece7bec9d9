"""Runtime orchestration of scraper modules."""

from cmexporter.runtime.exporter import Exporter
from cmexporter.runtime.registry import CollectResult, ModuleRegistry

__all__ = ["CollectResult", "Exporter", "ModuleRegistry"]
