"""Application services."""

from spotifyimport.application.services.library_mutator import LibraryMutator
from spotifyimport.application.services.report_writer import ReportWriter
from spotifyimport.application.services.track_matcher import TrackMatcher

__all__ = ["LibraryMutator", "ReportWriter", "TrackMatcher"]
