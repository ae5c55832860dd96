"""Value objects for the domain layer."""

from spotifyimport.domain.value_objects.query import (
    ALBUM_NOISE_SUFFIXES,
    build_search_query,
    trim_album_suffix,
)

__all__ = ["ALBUM_NOISE_SUFFIXES", "build_search_query", "trim_album_suffix"]
