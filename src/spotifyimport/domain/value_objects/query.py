"""Search query construction for catalog matching.

Hey future me - this module turns one scrobble into a Spotify search query!
Spotify's search understands field filters ("track:", "artist:", "album:", "year:"),
and scoping each value to its field gives MUCH better rank-0 hits than a bare
"title artist album" string.

The other half is album normalization. Last.fm-style exports carry whatever the
source catalog called the release, e.g. "Currents (Deluxe Edition)", while Spotify
may list the same track only on "Currents". An "album:" filter is literal, so that
one suffix turns a certain hit into zero results. We strip known noise suffixes
before building the query.

Examples:
    >>> trim_album_suffix("Example (Deluxe Edition)")
    'Example'
    >>> build_search_query(Record(title="T", artist_name="A", album_title=""))
    'track:T artist:A'
"""

from spotifyimport.domain.entities import Record

# =============================================================================
# ALBUM NOISE SUFFIXES
# Hey future me - ORDER MATTERS! The first suffix (in this order) that the album
# ends with is stripped, and only once. Put the more specific spelling first when
# one entry is a tail of another. All entries are lowercase with the leading
# separator included, comparison is case-insensitive.
# =============================================================================

ALBUM_NOISE_SUFFIXES: tuple[str, ...] = (
    # Deluxe variants (by far the most common mismatch)
    " (deluxe edition)",
    " [deluxe edition]",
    " (deluxe version)",
    " (deluxe)",
    " [deluxe]",
    # Other edition annotations
    " (expanded edition)",
    " (special edition)",
    " (anniversary edition)",
    " (collector's edition)",
    " (bonus track version)",
    " (remastered)",
    " (remastered version)",
    # Soundtracks
    " (original motion picture soundtrack)",
    " (music from the motion picture)",
    " (original soundtrack)",
    # Release format tails some stores append
    " - single",
    " - ep",
)

TITLE_QUALIFIER = "track"
ARTIST_QUALIFIER = "artist"
ALBUM_QUALIFIER = "album"
YEAR_QUALIFIER = "year"

QUERY_DELIMITER = " "


def trim_album_suffix(album: str) -> str:
    """Strip the first known noise suffix from an album title.

    Args:
        album: Album title as found in the scrobble

    Returns:
        The album with at most one suffix removed (unchanged if none matches)

    Examples:
        >>> trim_album_suffix("Example (Deluxe Edition)")
        'Example'
        >>> trim_album_suffix("Example (Deluxe Edition) (Deluxe)")
        'Example (Deluxe Edition)'
    """
    lowered = album.lower()
    for suffix in ALBUM_NOISE_SUFFIXES:
        if lowered.endswith(suffix):
            return album[: -len(suffix)]
    return album


def build_search_query(record: Record, include_year: bool = False) -> str:
    """Build a field-scoped Spotify search query for a record.

    Empty fields are left out entirely - an empty "album:" filter would match
    nothing. Each non-empty field appears exactly once with its qualifier.

    Args:
        record: Scrobble to search for
        include_year: Also scope by release year (off by default, remasters
            and compilations often carry a different year than the original)

    Returns:
        Query string, or "" if the record has no searchable field
    """
    album = trim_album_suffix(record.album_title or "")

    parts: list[str] = []
    for qualifier, value in (
        (TITLE_QUALIFIER, record.title),
        (ARTIST_QUALIFIER, record.artist_name),
        (ALBUM_QUALIFIER, album),
    ):
        value = (value or "").strip()
        if value:
            parts.append(f"{qualifier}:{value}")

    if include_year and record.year:
        parts.append(f"{YEAR_QUALIFIER}:{record.year}")

    return QUERY_DELIMITER.join(parts)
