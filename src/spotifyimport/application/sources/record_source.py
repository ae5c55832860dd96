"""RecordSource - feeds a decoded batch onto the work queue.

Hey future me - asyncio.Queue has no close(), so "closed" is spelled as a close
marker (None) per consumer, enqueued AFTER the last record. A worker that reads
None exits; because every worker takes exactly one marker, all of them terminate
and none of them steals a sibling's marker. Records themselves are taken by
whichever worker is free (work stealing, not broadcast), so each record is
processed exactly once.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator

from spotifyimport.domain.entities import Batch, Record
from spotifyimport.domain.exceptions import InvalidStateException

logger = logging.getLogger(__name__)

# Work queue item: a record, or None meaning "no more records for you".
WorkItem = Record | None
WorkQueue = asyncio.Queue[WorkItem]


class RecordSource:
    """Single-pass producer over one batch."""

    def __init__(self, batch: Batch) -> None:
        self._batch = batch
        self._consumed = False

    @property
    def declared_total(self) -> int:
        return self._batch.declared_total

    def __len__(self) -> int:
        return len(self._batch.songs)

    def _records(self) -> Iterator[Record]:
        if self._consumed:
            raise InvalidStateException("RecordSource has already been streamed")
        self._consumed = True
        return iter(self._batch.songs)

    async def stream(self, queue: WorkQueue, consumers: int) -> int:
        """Put every record on the queue once, then one close marker per consumer.

        Blocks on a full queue (backpressure), never drops.

        Args:
            queue: Work queue shared by the workers
            consumers: Number of workers reading the queue

        Returns:
            Number of records sent

        Raises:
            InvalidStateException: If the source was already streamed
        """
        sent = 0
        for record in self._records():
            await queue.put(record)
            sent += 1

        for _ in range(consumers):
            await queue.put(None)

        logger.debug("RecordSource exhausted: %d records sent", sent)
        return sent
