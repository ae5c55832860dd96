"""Tests for the Spotify HTTP client."""

import json

import httpx
import pytest

from spotifyimport.config.settings import DEFAULT_USER_AGENT, SpotifySettings
from spotifyimport.domain.exceptions import AuthenticationError
from spotifyimport.infrastructure.integrations.spotify_client import (
    MAX_IDS_PER_SAVE,
    SpotifyClient,
    build_cookie_header,
)

TOKEN_BODY = {
    "clientId": "d8a5ed958d274c2e8ee717e6a4b0971d",
    "accessToken": "BQ-token",
    "accessTokenExpirationTimestampMs": 1700000000000,
    "isAnonymous": False,
}


@pytest.fixture
def spotify_settings() -> SpotifySettings:
    """Create Spotify settings for testing."""
    return SpotifySettings(
        api_base_url="https://api.test/v1",
        token_url="https://open.test/get_access_token?reason=transport",
    )


def make_client(settings: SpotifySettings, handler) -> SpotifyClient:
    """Build a client whose requests are answered by `handler`."""
    return SpotifyClient(settings, transport=httpx.MockTransport(handler))


def test_build_cookie_header() -> None:
    """Both cookies end up in one header value."""
    assert build_cookie_header("dc", "key") == "sp_dc=dc; sp_key=key"


class TestSearchTrack:
    """Test track search."""

    async def test_sends_query_and_bearer(self, spotify_settings: SpotifySettings) -> None:
        """Search hits /search with the query, type and limit."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"tracks": {"items": [{"id": "abc"}]}})

        async with make_client(spotify_settings, handler) as client:
            result = await client.search_track("track:T artist:A", "tok")

        assert result == {"tracks": {"items": [{"id": "abc"}]}}
        request = seen[0]
        assert request.method == "GET"
        assert request.url.path == "/v1/search"
        assert request.url.params["q"] == "track:T artist:A"
        assert request.url.params["type"] == "track"
        assert request.url.params["limit"] == "1"
        assert request.headers["authorization"] == "Bearer tok"

    async def test_bad_status_raises(self, spotify_settings: SpotifySettings) -> None:
        """Non-success status raises HTTPStatusError."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429)

        async with make_client(spotify_settings, handler) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await client.search_track("q", "tok")

    async def test_transport_error_propagates(
        self, spotify_settings: SpotifySettings
    ) -> None:
        """Connection failures surface as httpx errors."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("boom", request=request)

        async with make_client(spotify_settings, handler) as client:
            with pytest.raises(httpx.ConnectError):
                await client.search_track("q", "tok")


class TestSaveTracks:
    """Test saving tracks to the library."""

    async def test_puts_ids(self, spotify_settings: SpotifySettings) -> None:
        """Save is a PUT /me/tracks with comma-joined ids."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        async with make_client(spotify_settings, handler) as client:
            await client.save_tracks(["a", "b"], "tok")

        request = seen[0]
        assert request.method == "PUT"
        assert request.url.path == "/v1/me/tracks"
        assert request.url.params["ids"] == "a,b"
        assert request.headers["authorization"] == "Bearer tok"

    async def test_caps_id_count(self, spotify_settings: SpotifySettings) -> None:
        """At most MAX_IDS_PER_SAVE ids are sent."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        ids = [f"id{i}" for i in range(MAX_IDS_PER_SAVE + 5)]
        async with make_client(spotify_settings, handler) as client:
            await client.save_tracks(ids, "tok")

        assert len(seen[0].url.params["ids"].split(",")) == MAX_IDS_PER_SAVE

    async def test_forbidden_raises(self, spotify_settings: SpotifySettings) -> None:
        """A 403 (missing scope) raises HTTPStatusError."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403)

        async with make_client(spotify_settings, handler) as client:
            with pytest.raises(httpx.HTTPStatusError) as exc_info:
                await client.save_tracks(["a"], "tok")

        assert exc_info.value.response.status_code == 403


class TestFetchWebPlayerToken:
    """Test the cookie-to-token exchange."""

    async def test_returns_token(self, spotify_settings: SpotifySettings) -> None:
        """A good response yields an AccessToken, cookies and UA are sent."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=TOKEN_BODY)

        async with make_client(spotify_settings, handler) as client:
            token = await client.fetch_web_player_token("dc", "key")

        assert token.access_token == "BQ-token"
        assert token.expiry_ms == 1700000000000
        request = seen[0]
        assert str(request.url) == spotify_settings.token_url
        assert request.headers["cookie"] == "sp_dc=dc; sp_key=key"
        assert request.headers["user-agent"] == DEFAULT_USER_AGENT

    async def test_bad_status(self, spotify_settings: SpotifySettings) -> None:
        """Non-success status is an AuthenticationError carrying the status."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text="nope")

        async with make_client(spotify_settings, handler) as client:
            with pytest.raises(AuthenticationError) as exc_info:
                await client.fetch_web_player_token("dc", "key")

        assert exc_info.value.http_status == 401
        assert exc_info.value.message == "bad response status: 401"

    async def test_transport_failure(self, spotify_settings: SpotifySettings) -> None:
        """Connection failures are AuthenticationError too."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        async with make_client(spotify_settings, handler) as client:
            with pytest.raises(AuthenticationError, match="token request failed"):
                await client.fetch_web_player_token("dc", "key")

    @pytest.mark.parametrize(
        "body",
        [
            "not json",
            json.dumps({"accessTokenExpirationTimestampMs": 1}),
            json.dumps({"accessToken": "x"}),
        ],
    )
    async def test_bad_body(self, spotify_settings: SpotifySettings, body: str) -> None:
        """Undecodable or incomplete bodies are AuthenticationError."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text=body)

        async with make_client(spotify_settings, handler) as client:
            with pytest.raises(AuthenticationError, match="unexpected token response"):
                await client.fetch_web_player_token("dc", "key")


class TestLifecycle:
    """Test lazy client creation and cleanup."""

    async def test_client_created_lazily(self, spotify_settings: SpotifySettings) -> None:
        """No httpx client exists until the first request."""
        client = SpotifyClient(spotify_settings)
        assert client._client is None
        await client._get_client()
        assert client._client is not None
        await client.close()
        assert client._client is None

    async def test_close_without_client(self, spotify_settings: SpotifySettings) -> None:
        """Closing an unused client is a no-op."""
        client = SpotifyClient(spotify_settings)
        await client.close()
        assert client._client is None
