"""Ring buffer storage for the exporter's own log records.

Provides bounded in-memory storage that automatically evicts oldest
entries when the buffer is full, so a long-running exporter keeps
predictable memory usage.
"""

from collections import deque
from collections.abc import AsyncIterable

from cmexporter.core.models import LogEntry


class RingBufferLogStorage:
    """Ring buffer implementation of LogStoragePort.

    Stores log entries in a fixed-size circular buffer. When the buffer
    is full, the oldest entry is automatically evicted to make room for
    new entries. write() is synchronous so logging handlers can call it
    from any thread.

    Args:
        max_size: Maximum number of entries to store.
    """

    def __init__(self, max_size: int) -> None:
        self._buffer: deque[LogEntry] = deque(maxlen=max_size)

    def write(self, entry: LogEntry) -> None:
        """Write a log entry to storage."""
        self._buffer.append(entry)

    async def read(
        self, since: float = 0, level: str | None = None
    ) -> AsyncIterable[LogEntry]:
        """Read log entries since the given timestamp.

        Returns entries with timestamp > since, ordered by timestamp ascending,
        optionally restricted to one level.
        """
        filtered = [
            e
            for e in list(self._buffer)
            if e.timestamp > since and (level is None or e.level == level)
        ]
        for entry in sorted(filtered, key=lambda e: e.timestamp):
            yield entry

    def __len__(self) -> int:
        return len(self._buffer)
