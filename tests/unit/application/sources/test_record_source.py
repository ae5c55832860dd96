"""Tests for RecordSource."""

import asyncio

import pytest

from spotifyimport.application.sources.record_source import RecordSource, WorkQueue
from spotifyimport.domain.entities import Batch, Record
from spotifyimport.domain.exceptions import InvalidStateException


@pytest.fixture
def batch() -> Batch:
    return Batch(total=5, songs=[Record(title=f"T{i}", ident=i) for i in range(3)])


class TestRecordSource:
    """Test feeding the work queue."""

    async def test_records_then_close_markers(self, batch: Batch) -> None:
        """Every record once, in order, then one None per consumer."""
        queue: WorkQueue = asyncio.Queue()

        sent = await RecordSource(batch).stream(queue, consumers=2)

        items = [queue.get_nowait() for _ in range(queue.qsize())]
        assert sent == 3
        assert items == [*batch.songs, None, None]

    async def test_backpressure(self, batch: Batch) -> None:
        """A bounded queue blocks the source until a consumer reads."""
        queue: WorkQueue = asyncio.Queue(maxsize=1)
        source = RecordSource(batch)

        task = asyncio.create_task(source.stream(queue, consumers=1))
        await asyncio.sleep(0)
        assert queue.qsize() == 1
        assert not task.done()

        received = []
        while (item := await queue.get()) is not None:
            received.append(item)

        assert received == batch.songs
        assert await task == 3

    async def test_single_pass(self, batch: Batch) -> None:
        """A source can only be streamed once."""
        source = RecordSource(batch)
        await source.stream(asyncio.Queue(), consumers=1)

        with pytest.raises(InvalidStateException):
            await source.stream(asyncio.Queue(), consumers=1)

    def test_totals(self, batch: Batch) -> None:
        """declared_total is advisory, len() is the real count."""
        source = RecordSource(batch)
        assert source.declared_total == 5
        assert len(source) == 3
