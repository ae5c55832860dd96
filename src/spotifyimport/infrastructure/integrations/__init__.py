"""External service integrations."""

from spotifyimport.infrastructure.integrations.spotify_client import SpotifyClient

__all__ = ["SpotifyClient"]
