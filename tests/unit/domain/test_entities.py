"""Tests for scrobble records, batches and outcomes."""

import json
from datetime import UTC, datetime

import pytest
from pydantic import ValidationError as PydanticValidationError

from spotifyimport.domain.entities import (
    AccessToken,
    Added,
    Batch,
    ImportSummary,
    Record,
    Skipped,
)
from spotifyimport.domain.exceptions import ValidationError

EXPORT = {
    "total": 2,
    "songs": [
        {
            "albumTitle": "Example (Deluxe Edition)",
            "artistName": "A",
            "title": "T",
            "year": 2020,
            "loved": True,
            "ident": "x",
        },
        {"artistName": "B", "title": "U"},
    ],
}


class TestRecord:
    """Test the Record model."""

    def test_reads_camel_case(self) -> None:
        """Wire names are camelCase."""
        record = Record.model_validate(EXPORT["songs"][0])
        assert record.title == "T"
        assert record.artist_name == "A"
        assert record.album_title == "Example (Deluxe Edition)"
        assert record.year == 2020
        assert record.loved is True
        assert record.ident == "x"

    def test_optional_fields_default(self) -> None:
        """Missing fields are None / False."""
        record = Record.model_validate({"title": "U"})
        assert record.artist_name is None
        assert record.album_title is None
        assert record.year is None
        assert record.loved is False
        assert record.ident is None

    def test_is_frozen(self) -> None:
        """Records cannot be modified once read."""
        record = Record(title="T")
        with pytest.raises(PydanticValidationError):
            record.title = "other"  # type: ignore[misc]

    def test_to_wire_keeps_input_shape(self) -> None:
        """to_wire emits the same keys the record was read with."""
        record = Record.model_validate(EXPORT["songs"][1])
        assert record.to_wire() == {"artistName": "B", "title": "U"}

    def test_to_wire_full_record(self) -> None:
        """All set fields survive with their camelCase names."""
        record = Record.model_validate(EXPORT["songs"][0])
        assert record.to_wire() == EXPORT["songs"][0]

    def test_describe(self) -> None:
        """describe() is a readable one-liner."""
        record = Record.model_validate(EXPORT["songs"][0])
        assert record.describe() == '"T" by A (Example (Deluxe Edition)) [x]'

    def test_describe_with_missing_fields(self) -> None:
        """Missing title/artist are shown as '?'."""
        assert Record().describe() == '"?" by ?'


class TestBatch:
    """Test batch decoding."""

    def test_from_json_object(self) -> None:
        """The exporter's object form decodes."""
        batch = Batch.from_json(json.dumps(EXPORT))
        assert batch.total == 2
        assert len(batch.songs) == 2
        assert batch.songs[1].title == "U"

    def test_from_json_bare_array(self) -> None:
        """A failures report (bare array) is accepted as input."""
        batch = Batch.from_json(json.dumps(EXPORT["songs"]))
        assert batch.total is None
        assert len(batch.songs) == 2
        assert batch.declared_total == 2

    def test_declared_total_is_advisory(self) -> None:
        """The declared total is reported as given, even if wrong."""
        batch = Batch.from_json(json.dumps({"total": 10, "songs": []}))
        assert batch.declared_total == 10
        assert batch.songs == []

    def test_empty_songs(self) -> None:
        """An empty batch is valid."""
        batch = Batch.from_json('{"total": 0, "songs": []}')
        assert batch.songs == []

    def test_invalid_json_raises_validation_error(self) -> None:
        """Malformed JSON is a domain ValidationError."""
        with pytest.raises(ValidationError, match="Invalid scrobble batch"):
            Batch.from_json("{not json")

    def test_missing_songs_raises_validation_error(self) -> None:
        """An object without songs is rejected."""
        with pytest.raises(ValidationError):
            Batch.from_json('{"total": 1}')

    def test_wrong_field_type_raises_validation_error(self) -> None:
        """A non-integer year is rejected with the field location."""
        with pytest.raises(ValidationError, match="songs.0.year"):
            Batch.from_json('{"songs": [{"title": "T", "year": "soon"}]}')


class TestOutcomes:
    """Test outcome and summary types."""

    def test_skipped_reason(self) -> None:
        """reason joins stage and error."""
        skipped = Skipped(
            record=Record(title="T"), stage="search track", error="no results"
        )
        assert skipped.reason == "search track: no results"

    def test_added_holds_catalog_id(self) -> None:
        """Added carries the matched id."""
        added = Added(record=Record(title="T"), catalog_id="abc")
        assert added.catalog_id == "abc"

    def test_summary_skipped_count(self) -> None:
        """skipped_count follows the skipped list."""
        summary = ImportSummary(declared_total=3)
        summary.skipped.append(Record(title="T"))
        assert summary.skipped_count == 1
        assert summary.report_path is None


class TestAccessToken:
    """Test the access token model."""

    def test_parses_token_response(self) -> None:
        """Token endpoint fields map onto the model."""
        token = AccessToken.model_validate_json(
            '{"accessToken": "BQ-token", '
            '"accessTokenExpirationTimestampMs": 1700000000000, '
            '"isAnonymous": false, "clientId": "ignored"}'
        )
        assert token.access_token == "BQ-token"
        assert token.expires_at == datetime(2023, 11, 14, 22, 13, 20, tzinfo=UTC)
        assert token.is_anonymous is False

    def test_token_not_in_repr(self) -> None:
        """The bearer token never shows up in repr()."""
        token = AccessToken(access_token="secret", expiry_ms=0)
        assert "secret" not in repr(token)
