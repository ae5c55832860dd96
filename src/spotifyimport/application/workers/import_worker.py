# Hey future me - this is the heart of the importer!
#
# N worker tasks share ONE work queue (records) and ONE outcome queue (results).
# Every worker runs the same loop:
#
#   record = await work_queue.get()
#     └─► None? → exit (that was my close marker)
#     └─► TrackMatcher.match()       → MatchError?  → Skipped("search track")
#         └─► save mode? LibraryMutator.add() → MutateError? → Skipped("add track")
#             └─► Added
#
# Workers never talk to each other. The only shared things are the two queues,
# the bearer token (read-only) and the SpotifyClient (one httpx pool, safe for
# concurrent use). One bad record never takes the run down - but only the domain
# MatchError/MutateError are treated as "bad record". Anything else is a bug and
# is allowed to blow up the run.
"""Import worker pool - matches and saves records concurrently."""

from __future__ import annotations

import asyncio
import logging

from spotifyimport.application.services.library_mutator import LibraryMutator
from spotifyimport.application.services.track_matcher import TrackMatcher
from spotifyimport.application.sources.record_source import WorkQueue
from spotifyimport.domain.entities import Added, Outcome, Record, Skipped
from spotifyimport.domain.exceptions import ConfigurationError, MatchError, MutateError
from spotifyimport.infrastructure.observability.logging import set_correlation_id

logger = logging.getLogger(__name__)

# Outcome queue item: an outcome, or None once every worker has finished.
OutcomeQueue = asyncio.Queue[Outcome | None]


class ImportWorkerPool:
    """Fixed-size pool of import workers.

    Key design decisions:
    1. Fixed number of tasks for the whole run, started together
       - Each task handles one record at a time
       - All tasks pull from the same queue
    2. No cancellation and no per-run deadline
       - A worker exits only on its close marker
       - A hung request stalls one worker, the others keep going
    3. No retries
       - A failed record is reported once as Skipped and never retried

    Usage:
        pool = ImportWorkerPool(matcher, mutator, token, concurrency=20, save=True)
        await pool.run(work_queue, outcome_queue)
    """

    def __init__(
        self,
        matcher: TrackMatcher,
        mutator: LibraryMutator | None,
        access_token: str,
        concurrency: int = 20,
        save: bool = False,
    ) -> None:
        """Initialize pool.

        Args:
            matcher: Resolves records to catalog ids
            mutator: Saves matched tracks (required when save=True)
            access_token: Bearer token shared by all workers
            concurrency: Number of worker tasks
            save: Save matched tracks to the library (False = report only)

        Raises:
            ConfigurationError: On a non-positive concurrency or save without mutator
        """
        if concurrency < 1:
            raise ConfigurationError(f"workers must be >= 1, got {concurrency}")
        if save and mutator is None:
            raise ConfigurationError("save mode needs a LibraryMutator")

        self._matcher = matcher
        self._mutator = mutator
        self._access_token = access_token
        self._concurrency = concurrency
        self._save = save
        self._tasks: list[asyncio.Task[int]] = []

    @property
    def concurrency(self) -> int:
        return self._concurrency

    async def run(self, work_queue: WorkQueue, outcome_queue: OutcomeQueue) -> int:
        """Start all workers and wait until every one has seen its close marker.

        Args:
            work_queue: Records to process, followed by one None per worker
            outcome_queue: Where each worker puts one outcome per record

        Returns:
            Number of records processed across all workers
        """
        self._tasks = [
            asyncio.create_task(
                self._process_loop(i, work_queue, outcome_queue),
                name=f"import-worker-{i}",
            )
            for i in range(self._concurrency)
        ]
        logger.debug(
            "ImportWorkerPool started with %d workers (save=%s)",
            self._concurrency,
            self._save,
        )

        try:
            counts = await asyncio.gather(*self._tasks)
        finally:
            # Only reached with live tasks if one worker crashed - don't leave the rest orphaned.
            for task in self._tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*self._tasks, return_exceptions=True)
            self._tasks = []

        return sum(counts)

    async def _process_loop(
        self, worker_id: int, work_queue: WorkQueue, outcome_queue: OutcomeQueue
    ) -> int:
        """Main loop of one worker.

        Args:
            worker_id: Worker identifier for logging
            work_queue: Shared work queue
            outcome_queue: Shared outcome queue

        Returns:
            Number of records this worker processed
        """
        processed = 0
        while True:
            record = await work_queue.get()
            if record is None:
                break

            outcome = await self.process_record(record)
            await outcome_queue.put(outcome)
            processed += 1

        logger.debug("Worker %d done after %d records", worker_id, processed)
        return processed

    async def process_record(self, record: Record) -> Outcome:
        """Match (and maybe save) one record.

        Args:
            record: Scrobble to import

        Returns:
            Added, or Skipped tagged with the failing stage
        """
        set_correlation_id(str(record.ident) if record.ident is not None else None)

        try:
            catalog_id = await self._matcher.match(record, self._access_token)
        except MatchError as e:
            return Skipped(record=record, stage=e.stage, error=e.message)

        if self._save and self._mutator is not None:
            try:
                await self._mutator.add(catalog_id, self._access_token)
            except MutateError as e:
                return Skipped(record=record, stage=e.stage, error=e.message)

        return Added(record=record, catalog_id=catalog_id)
