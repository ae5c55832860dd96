"""Worker system - concurrent record processing."""

from spotifyimport.application.workers.import_worker import (
    ImportWorkerPool,
    OutcomeQueue,
)
from spotifyimport.application.workers.outcome_collector import OutcomeCollector

__all__ = ["ImportWorkerPool", "OutcomeCollector", "OutcomeQueue"]
