"""Import scrobble history into a Spotify library."""

__version__ = "0.1.0"
