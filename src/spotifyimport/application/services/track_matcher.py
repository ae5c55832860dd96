"""TrackMatcher - resolves one scrobble to a Spotify catalog track id."""

import logging
from typing import Any

import httpx

from spotifyimport.domain.entities import CatalogTrackId, Record
from spotifyimport.domain.exceptions import (
    MatchBadStatusError,
    MatchTransportError,
    NoResultsError,
)
from spotifyimport.domain.value_objects import build_search_query
from spotifyimport.infrastructure.integrations.spotify_client import SpotifyClient

logger = logging.getLogger(__name__)


class TrackMatcher:
    """Search the catalog for a record and take the top hit.

    Hey future me - there is NO scoring here on purpose. We ask Spotify for a single
    candidate and trust its relevance ranking. If matches look wrong, fix the query
    (see domain/value_objects/query.py), don't bolt fuzzy matching on top.
    """

    def __init__(self, client: SpotifyClient, include_year: bool = False) -> None:
        """
        Initialize matcher.

        Args:
            client: Shared Spotify client
            include_year: Add a "year:" filter to the query
        """
        self._client = client
        self._include_year = include_year

    async def match(self, record: Record, access_token: str) -> CatalogTrackId:
        """Find the best catalog track for a record.

        Args:
            record: Scrobble to match
            access_token: Bearer token

        Returns:
            Spotify track id of the rank-0 result

        Raises:
            MatchTransportError: Request failed or the body was not usable
            MatchBadStatusError: Search answered with a non-success status
            NoResultsError: Nothing found (or nothing to search for)
        """
        query = build_search_query(record, include_year=self._include_year)
        if not query:
            raise NoResultsError("record has no title, artist or album to search for")

        logger.debug("Searching %r", query)

        try:
            result = await self._client.search_track(query, access_token, limit=1)
        except httpx.HTTPStatusError as e:
            raise MatchBadStatusError(e.response.status_code) from e
        except httpx.HTTPError as e:
            raise MatchTransportError(str(e) or e.__class__.__name__) from e
        except ValueError as e:
            raise MatchTransportError(f"undecodable search response: {e}") from e

        items = _track_items(result)
        if not items:
            raise NoResultsError()

        catalog_id = _track_id(items[0])
        if not catalog_id:
            raise MatchTransportError("search result without track id")

        return catalog_id


def _track_id(item: Any) -> str | None:
    """Track id of a search item, taken from "uri" (spotify:track:<id>) if "id" is absent."""
    if not isinstance(item, dict):
        return None
    if item.get("id"):
        return str(item["id"])
    uri = item.get("uri") or ""
    prefix, _, track_id = str(uri).rpartition(":")
    return track_id if prefix.endswith("track") and track_id else None


def _track_items(result: Any) -> list[Any]:
    """Pull tracks.items out of a search response, treating missing or malformed parts as empty."""
    if not isinstance(result, dict):
        return []
    tracks = result.get("tracks")
    if not isinstance(tracks, dict):
        return []
    items = tracks.get("items")
    return items if isinstance(items, list) else []
