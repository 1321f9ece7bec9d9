"""Framework adapters serving the exporter endpoints."""
