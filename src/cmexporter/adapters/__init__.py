"""Adapters connecting the core pipeline to HTTP, queues and logging."""
