"""Application settings loaded from environment variables and an optional .env file.

Hey future me - everything is namespaced under SPOTIFYIMPORT_ with "__" as the
nesting delimiter, so the worker count is SPOTIFYIMPORT_PIPELINE__WORKERS=32 and the
request timeout is SPOTIFYIMPORT_SPOTIFY__TIMEOUT=10. CLI flags win over both.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Desktop browser UA. The web-player token endpoint rejects obvious non-browser clients.
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_13_2) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/63.0.3239.132 Safari/537.36"
)


class SpotifySettings(BaseModel):
    """Spotify endpoints and HTTP client behaviour."""

    api_base_url: str = "https://api.spotify.com/v1"
    token_url: str = (
        "https://open.spotify.com/get_access_token"
        "?reason=transport&productType=web_player"
    )
    user_agent: str = DEFAULT_USER_AGENT
    # Seconds per request. A timed-out search/save skips that one record.
    timeout: float = Field(default=30.0, gt=0)


class PipelineSettings(BaseModel):
    """Import pipeline settings."""

    # Tens of concurrent lookups is plenty - Spotify starts answering 429 well before 100.
    workers: int = Field(default=20, ge=1)
    report_dir: Path = Path(".")
    include_year: bool = False


class ObservabilitySettings(BaseModel):
    """Logging settings."""

    log_level: str = "INFO"
    log_json_format: bool = False

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        return value.upper()


class Settings(BaseSettings):
    """Root settings object."""

    model_config = SettingsConfigDict(
        env_prefix="SPOTIFYIMPORT_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    spotify: SpotifySettings = Field(default_factory=SpotifySettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
