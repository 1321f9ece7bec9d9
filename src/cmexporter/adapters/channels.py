"""Output channels implementing SampleSinkPort."""

import asyncio
from collections.abc import AsyncIterator
from typing import cast

from cmexporter.core.models import MetricSample

_CLOSED = object()


class InMemorySampleSink:
    """In-memory implementation of SampleSinkPort.

    Stores samples in a list. Suitable for testing and for single-module
    scrapes where no concurrent consumer is needed.
    """

    def __init__(self) -> None:
        self._samples: list[MetricSample] = []

    async def send(self, sample: MetricSample) -> None:
        """Append a sample."""
        self._samples.append(sample)

    @property
    def samples(self) -> list[MetricSample]:
        return list(self._samples)

    def __len__(self) -> int:
        return len(self._samples)


class SampleChannel:
    """Bounded queue shared by concurrent scraper modules.

    Writers suspend in send() while the queue is full, so a slow consumer
    applies back-pressure instead of growing memory. A consumer iterates the
    channel with ``async for`` until close() has been called and every
    queued sample has been read.

    Args:
        maxsize: Queue capacity.
    """

    def __init__(self, maxsize: int = 1024) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    async def send(self, sample: MetricSample) -> None:
        """Queue a sample, waiting for room if the channel is full."""
        if self._closed:
            raise RuntimeError("send on closed channel")
        await self._queue.put(sample)

    async def close(self) -> None:
        """Mark the end of the stream for the consumer."""
        if self._closed:
            return
        self._closed = True
        await self._queue.put(_CLOSED)

    async def __aiter__(self) -> AsyncIterator[MetricSample]:
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            yield cast(MetricSample, item)
