"""Domain entities: scrobble records, batches, per-record outcomes and run summaries."""

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from spotifyimport.domain.exceptions import ValidationError

# Opaque Spotify track id (the "4uLU6hMCjMI75M1A2tKUQC" part of a track URI).
CatalogTrackId = str


# Hey future me, Record is ONE scrobble as exported from the listening-history service.
# The wire format is camelCase (albumTitle, artistName), hence the alias generator.
# extra="allow" is what lets the failure report round-trip: whatever extra keys the
# export carried (playCount, mbid, ...) are written back untouched, so a failures file
# can be piped straight into the next run. Frozen because a record is shared between
# the source, one worker and the collector - nobody gets to edit it.
class Record(BaseModel):
    """One historical play entry."""

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    title: str | None = None
    artist_name: str | None = None
    album_title: str | None = None
    year: int | None = None
    loved: bool = False
    ident: str | int | None = None

    def describe(self) -> str:
        """Human-readable one-liner for log output."""
        text = f'"{self.title or "?"}" by {self.artist_name or "?"}'
        if self.album_title:
            text += f" ({self.album_title})"
        if self.ident is not None:
            text += f" [{self.ident}]"
        return text

    def to_wire(self) -> dict[str, Any]:
        """Serialize in the same shape the record was read in."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class Batch(BaseModel):
    """A decoded scrobble export.

    `total` is whatever the exporter claimed. It is advisory and only used for
    progress/summary output - the real count is len(songs).
    """

    model_config = ConfigDict(extra="ignore")

    total: int | None = None
    songs: list[Record]

    @property
    def declared_total(self) -> int:
        """Declared count, falling back to the number of songs."""
        return self.total if self.total is not None else len(self.songs)

    @classmethod
    def from_json(cls, text: str | bytes) -> "Batch":
        """Decode a batch from JSON text.

        Accepts the exporter's object ({"total": n, "songs": [...]}) and a bare
        array of records, which is what a failures_<ts>.json report contains.

        Raises:
            ValidationError: If the text is not valid JSON or has the wrong shape
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid scrobble batch: {e}") from e

        if isinstance(data, list):
            data = {"songs": data}

        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid scrobble batch: {e.error_count()} validation error(s): "
                + "; ".join(
                    f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                    for err in e.errors()
                )
            ) from e


# =============================================================================
# Outcomes
# Hey future me - every record produces EXACTLY ONE of these, by exactly one worker,
# consumed exactly once by the collector. There is no third "matched but not added"
# state on purpose: a failed save is a Skipped with stage "add track".
# =============================================================================


@dataclass(frozen=True)
class Added:
    """The record was matched (and saved, in save mode)."""

    record: Record
    catalog_id: CatalogTrackId


@dataclass(frozen=True)
class Skipped:
    """The record failed at `stage` and was left out."""

    record: Record
    stage: str
    error: str

    @property
    def reason(self) -> str:
        return f"{self.stage}: {self.error}"


Outcome = Added | Skipped


@dataclass
class ImportSummary:
    """Result of one import run."""

    declared_total: int
    processed: int = 0
    added: int = 0
    skipped: list[Record] = field(default_factory=list)
    report_path: Path | None = None

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


class AccessToken(BaseModel):
    """Web-player bearer token as returned by the token endpoint."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    access_token: str = Field(alias="accessToken", repr=False)
    expiry_ms: int = Field(alias="accessTokenExpirationTimestampMs")
    is_anonymous: bool = Field(default=False, alias="isAnonymous")

    @property
    def expires_at(self) -> datetime:
        """Expiry as an aware UTC datetime."""
        return datetime.fromtimestamp(self.expiry_ms / 1000, tz=UTC)


__all__ = [
    "AccessToken",
    "Added",
    "Batch",
    "CatalogTrackId",
    "ImportSummary",
    "Outcome",
    "Record",
    "Skipped",
]
