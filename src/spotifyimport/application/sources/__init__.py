"""Record sources."""

from spotifyimport.application.sources.record_source import (
    RecordSource,
    WorkItem,
    WorkQueue,
)

__all__ = ["RecordSource", "WorkItem", "WorkQueue"]
