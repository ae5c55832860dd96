"""Tests for OutcomeCollector."""

import asyncio
import logging

import pytest

from spotifyimport.application.workers.import_worker import OutcomeQueue
from spotifyimport.application.workers.outcome_collector import OutcomeCollector
from spotifyimport.domain.entities import Added, Record, Skipped


class TestOutcomeCollector:
    """Test outcome tallying and logging."""

    def test_added_is_counted_and_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Added bumps processed and added and logs at INFO."""
        collector = OutcomeCollector(declared_total=2)

        with caplog.at_level(logging.INFO):
            collector.collect(Added(record=Record(title="T", artist_name="A"), catalog_id="abc"))

        assert collector.summary.processed == 1
        assert collector.summary.added == 1
        assert collector.summary.skipped == []
        assert '[1/2] added: "T" by A → abc' in caplog.text

    def test_skipped_is_kept_and_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Skipped records are kept for the report and logged at WARNING."""
        record = Record(title="T", artist_name="A", ident="x")
        collector = OutcomeCollector(declared_total=1)

        with caplog.at_level(logging.INFO):
            collector.collect(Skipped(record=record, stage="search track", error="no results"))

        assert collector.summary.skipped == [record]
        assert collector.summary.added == 0
        warning = caplog.records[-1]
        assert warning.levelno == logging.WARNING
        assert "skipped (search track: no results)" in warning.getMessage()

    def test_unknown_outcome(self) -> None:
        """Anything that is not Added or Skipped is a bug."""
        with pytest.raises(TypeError):
            OutcomeCollector(declared_total=1).collect("nope")  # type: ignore[arg-type]

    async def test_drain_until_close_marker(self) -> None:
        """drain() consumes everything up to the None marker."""
        queue: OutcomeQueue = asyncio.Queue()
        records = [Record(title=f"T{i}", ident=i) for i in range(3)]
        queue.put_nowait(Added(record=records[0], catalog_id="a"))
        queue.put_nowait(Skipped(record=records[1], stage="add track", error="x"))
        queue.put_nowait(Added(record=records[2], catalog_id="c"))
        queue.put_nowait(None)

        summary = await OutcomeCollector(declared_total=3).drain(queue)

        assert summary.processed == 3
        assert summary.added == 2
        assert summary.skipped == [records[1]]
        assert queue.empty()
