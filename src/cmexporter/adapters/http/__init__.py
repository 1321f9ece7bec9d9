"""HTTP adapters for the upstream manager."""

from cmexporter.adapters.http.client import HttpxQueryClient

__all__ = ["HttpxQueryClient"]
