"""Storage adapters implementing core ports."""

from cmexporter.adapters.storage.ring_buffer import RingBufferLogStorage

__all__ = ["RingBufferLogStorage"]
