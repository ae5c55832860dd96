"""LibraryMutator - saves a matched track to the user's library."""

import logging

import httpx

from spotifyimport.domain.entities import CatalogTrackId
from spotifyimport.domain.exceptions import MutateBadStatusError, MutateTransportError
from spotifyimport.infrastructure.integrations.spotify_client import SpotifyClient

logger = logging.getLogger(__name__)


class LibraryMutator:
    """Add tracks to "Liked Songs", one id per call."""

    def __init__(self, client: SpotifyClient) -> None:
        self._client = client

    # Hey future me - no "is it already saved?" check. Saving twice is harmless on
    # Spotify's side and checking first would double the request count.
    async def add(self, catalog_id: CatalogTrackId, access_token: str) -> None:
        """Save one track.

        Args:
            catalog_id: Spotify track id
            access_token: Bearer token

        Raises:
            MutateTransportError: Request could not be sent
            MutateBadStatusError: Save answered with a non-success status
        """
        try:
            await self._client.save_tracks([catalog_id], access_token)
        except httpx.HTTPStatusError as e:
            raise MutateBadStatusError(e.response.status_code) from e
        except httpx.HTTPError as e:
            raise MutateTransportError(str(e) or e.__class__.__name__) from e

        logger.debug("Saved track %s", catalog_id)
