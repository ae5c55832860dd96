"""Use case for importing a batch of scrobbles into the Spotify library.

Hey future me - this is where the pipeline gets wired together:

    RecordSource ──► work queue ──► ImportWorkerPool (N tasks) ──► outcome queue
                                                                       │
                                          ReportWriter ◄── OutcomeCollector

Source, workers and collector all run at the same time. There is exactly ONE
join point: after the source and every worker have finished we close the
outcome queue, wait for the collector to drain it, and only then write the
failure report. Nothing is written while outcomes may still be in flight.
"""

import asyncio
import logging
from dataclasses import dataclass

from spotifyimport.application.services.library_mutator import LibraryMutator
from spotifyimport.application.services.report_writer import ReportWriter
from spotifyimport.application.services.track_matcher import TrackMatcher
from spotifyimport.application.sources.record_source import RecordSource, WorkQueue
from spotifyimport.application.use_cases import UseCase
from spotifyimport.application.workers.import_worker import (
    ImportWorkerPool,
    OutcomeQueue,
)
from spotifyimport.application.workers.outcome_collector import OutcomeCollector
from spotifyimport.domain.entities import Batch, ImportSummary
from spotifyimport.infrastructure.observability.logging import set_correlation_id

logger = logging.getLogger(__name__)


@dataclass
class ImportScrobblesRequest:
    """Request to import one batch.

    save=False is a dry run: every record is matched, nothing is written to the
    library, and a successful match counts as added.
    """

    batch: Batch
    access_token: str
    save: bool = False


class ImportScrobblesUseCase(UseCase[ImportScrobblesRequest, ImportSummary]):
    """Match every record of a batch and optionally save the matches."""

    def __init__(
        self,
        matcher: TrackMatcher,
        mutator: LibraryMutator | None,
        report_writer: ReportWriter,
        workers: int = 20,
    ) -> None:
        """Initialize the use case.

        Args:
            matcher: Shared track matcher
            mutator: Shared library mutator (only used in save mode)
            report_writer: Writes the failure report after the run
            workers: Worker pool size
        """
        self._matcher = matcher
        self._mutator = mutator
        self._report_writer = report_writer
        self._workers = workers

    async def execute(self, request: ImportScrobblesRequest) -> ImportSummary:
        """Run the pipeline over one batch.

        Args:
            request: Batch, token and mode

        Returns:
            Summary with counts, skipped records and the report path

        Raises:
            ReportWriteError: If the failure report cannot be written
        """
        run_id = set_correlation_id()
        source = RecordSource(request.batch)
        pool = ImportWorkerPool(
            matcher=self._matcher,
            mutator=self._mutator,
            access_token=request.access_token,
            concurrency=self._workers,
            save=request.save,
        )
        collector = OutcomeCollector(declared_total=source.declared_total)

        # Bounded work queue = backpressure on the source, never drops.
        work_queue: WorkQueue = asyncio.Queue(maxsize=2 * pool.concurrency)
        outcome_queue: OutcomeQueue = asyncio.Queue()

        logger.info(
            "Importing %d scrobbles with %d workers (%s, run %s)",
            len(source),
            pool.concurrency,
            "save" if request.save else "dry run",
            run_id,
        )

        producer = asyncio.create_task(
            source.stream(work_queue, pool.concurrency), name="record-source"
        )
        consumers = asyncio.create_task(
            pool.run(work_queue, outcome_queue), name="import-workers"
        )
        collecting = asyncio.create_task(
            collector.drain(outcome_queue), name="outcome-collector"
        )

        try:
            await asyncio.gather(producer, consumers)
            await outcome_queue.put(None)
            summary = await collecting
        finally:
            for task in (producer, consumers, collecting):
                if not task.done():
                    task.cancel()
            await asyncio.gather(
                producer, consumers, collecting, return_exceptions=True
            )

        summary.report_path = self._report_writer.write(summary.skipped)
        self._log_summary(summary, request.save)
        return summary

    @staticmethod
    def _log_summary(summary: ImportSummary, save: bool) -> None:
        verb = "Added" if save else "Dry run: matched"
        if summary.report_path is not None:
            logger.info(
                "%s %d of %d tracks, %d skipped, failures written to %s",
                verb,
                summary.added,
                summary.declared_total,
                summary.skipped_count,
                summary.report_path,
            )
        else:
            logger.info(
                "%s %d of %d tracks", verb, summary.added, summary.declared_total
            )
