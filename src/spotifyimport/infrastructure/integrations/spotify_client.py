"""Spotify HTTP client: track search, saving tracks, and web-player token exchange."""

import logging
from typing import Any, cast

import httpx
from pydantic import ValidationError as PydanticValidationError

from spotifyimport.config.settings import SpotifySettings
from spotifyimport.domain.entities import AccessToken
from spotifyimport.domain.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

# Spotify accepts at most 50 ids per /me/tracks call.
MAX_IDS_PER_SAVE = 50


def build_cookie_header(sp_dc: str, sp_key: str) -> str:
    """Render the two web-player cookies as a Cookie header value."""
    cookies = (("sp_dc", sp_dc), ("sp_key", sp_key))
    return "; ".join(f"{name}={value}" for name, value in cookies)


class SpotifyClient:
    """HTTP client for the Spotify endpoints the importer needs.

    ONE instance is shared by every worker of a run. httpx.AsyncClient is safe
    for concurrent use from many tasks on the same loop, and sharing it means
    the workers share one keep-alive connection pool.
    """

    # Hey future me, this init is deceptively simple - we DON'T create the HTTP client here
    # because we need to be async-friendly. The actual client gets lazy-loaded in _get_client().
    # `transport` is only there so tests can plug in httpx.MockTransport.
    def __init__(
        self,
        settings: SpotifySettings,
        max_connections: int = 20,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize Spotify client.

        Args:
            settings: Spotify configuration settings
            max_connections: Connection pool size, should be >= the worker count
            transport: Optional custom transport (tests)
        """
        self.settings = settings
        self._max_connections = max_connections
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.settings.timeout),
                limits=httpx.Limits(
                    max_connections=self._max_connections,
                    max_keepalive_connections=self._max_connections,
                ),
                transport=self._transport,
            )
        return self._client

    # Hey, this close() is IMPORTANT - if you don't call it, you'll leak connections.
    # Prefer "async with SpotifyClient(...) as client:" which calls it for you.
    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # Hey future me - every bearer-authenticated call goes through here.
    # No retry and no throttling: one request, one response. A 429 is just another
    # non-success status for the caller to deal with.
    async def _api_request(
        self,
        method: str,
        url: str,
        access_token: str,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send one authenticated API request.

        Args:
            method: HTTP method (GET, PUT, ...)
            url: Full URL to request
            access_token: Bearer token
            params: Query parameters

        Returns:
            httpx.Response object (status not checked)

        Raises:
            httpx.HTTPError: If the request could not be sent
        """
        client = await self._get_client()
        return await client.request(
            method=method,
            url=url,
            params=params,
            headers={"Authorization": f"Bearer {access_token}"},
        )

    # Yo future me, Spotify search uses field filters ("track:", "artist:", "album:").
    # We only ever want the top hit, so limit defaults to 1 - the service's own
    # relevance ranking decides, we don't second-guess it.
    async def search_track(
        self, query: str, access_token: str, limit: int = 1
    ) -> dict[str, Any]:
        """
        Search for tracks.

        Args:
            query: Search query
            access_token: Bearer token
            limit: Maximum number of results

        Returns:
            Search results (raw JSON)

        Raises:
            httpx.HTTPStatusError: On a non-success status
            httpx.HTTPError: If the request fails
            ValueError: If the body is not JSON
        """
        params: dict[str, str | int] = {
            "q": query,
            "type": "track",
            "limit": limit,
        }

        response = await self._api_request(
            method="GET",
            url=f"{self.settings.api_base_url}/search",
            access_token=access_token,
            params=params,
        )
        response.raise_for_status()
        return cast(dict[str, Any], response.json())

    async def save_tracks(self, track_ids: list[str], access_token: str) -> None:
        """Save tracks to the user's library ("Liked Songs").

        Saving an already-saved track is not an error on Spotify's side and is
        not checked here either.

        Args:
            track_ids: Spotify track IDs (max 50)
            access_token: Bearer token with user-library-modify scope

        Raises:
            httpx.HTTPStatusError: On a non-success status (403 if missing scope)
            httpx.HTTPError: If the request fails
        """
        track_ids = track_ids[:MAX_IDS_PER_SAVE]

        response = await self._api_request(
            method="PUT",
            url=f"{self.settings.api_base_url}/me/tracks",
            access_token=access_token,
            params={"ids": ",".join(track_ids)},
        )
        response.raise_for_status()

    # Listen up future me, this is NOT OAuth. It's the same call open.spotify.com makes on
    # page load: the browser's sp_dc/sp_key cookies buy a short-lived (~1h) bearer token
    # with the web player's scopes, library-modify included. One token per run, never
    # refreshed. Don't log the cookies or the token!
    async def fetch_web_player_token(self, sp_dc: str, sp_key: str) -> AccessToken:
        """Exchange web-player cookies for a bearer token.

        Args:
            sp_dc: Value of the sp_dc cookie
            sp_key: Value of the sp_key cookie

        Returns:
            AccessToken with the bearer token and its expiry

        Raises:
            AuthenticationError: On transport failure, non-success status or bad body
        """
        client = await self._get_client()

        try:
            response = await client.get(
                self.settings.token_url,
                headers={
                    "user-agent": self.settings.user_agent,
                    "cookie": build_cookie_header(sp_dc, sp_key),
                },
            )
        except httpx.HTTPError as e:
            raise AuthenticationError(f"token request failed: {e}") from e

        if not response.is_success:
            raise AuthenticationError(
                f"bad response status: {response.status_code}",
                http_status=response.status_code,
            )

        try:
            token = AccessToken.model_validate_json(response.content)
        except PydanticValidationError as e:
            raise AuthenticationError(f"unexpected token response: {e}") from e

        logger.debug(
            "Fetched web-player token, expires at %s", token.expires_at.isoformat()
        )
        return token

    # Hey future me, these context manager methods let you use this client with
    # "async with SpotifyClient(...) as client:" syntax. This is THE preferred way.
    async def __aenter__(self) -> "SpotifyClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
