"""Outcome collector - the single consumer of the outcome queue."""

from __future__ import annotations

import logging

from spotifyimport.application.workers.import_worker import OutcomeQueue
from spotifyimport.domain.entities import Added, ImportSummary, Outcome, Skipped

logger = logging.getLogger(__name__)


class OutcomeCollector:
    """Drain outcomes, log each one, and keep the run's tallies.

    Hey future me - this is the ONLY reader of the outcome queue and the ONLY
    writer of the summary, which is why there is no lock anywhere. Workers never
    touch the counts. If you ever add a second collector, you need one.
    """

    def __init__(self, declared_total: int) -> None:
        """
        Initialize collector.

        Args:
            declared_total: Advisory total from the batch, used for progress output only
        """
        self._summary = ImportSummary(declared_total=declared_total)

    @property
    def summary(self) -> ImportSummary:
        return self._summary

    def collect(self, outcome: Outcome) -> None:
        """Record and log one outcome."""
        summary = self._summary
        summary.processed += 1

        if isinstance(outcome, Added):
            summary.added += 1
            logger.info(
                "[%d/%d] added: %s → %s",
                summary.processed,
                summary.declared_total,
                outcome.record.describe(),
                outcome.catalog_id,
            )
        elif isinstance(outcome, Skipped):
            summary.skipped.append(outcome.record)
            logger.warning(
                "[%d/%d] skipped (%s): %s",
                summary.processed,
                summary.declared_total,
                outcome.reason,
                outcome.record.describe(),
            )
        else:
            raise TypeError(f"Unknown outcome type: {type(outcome).__name__}")

    async def drain(self, queue: OutcomeQueue) -> ImportSummary:
        """Consume outcomes until the close marker arrives.

        Args:
            queue: Outcome queue, closed with a single None after all workers finish

        Returns:
            The accumulated summary
        """
        while True:
            outcome = await queue.get()
            if outcome is None:
                break
            self.collect(outcome)

        return self._summary
