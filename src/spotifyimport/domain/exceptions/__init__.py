"""Domain exceptions."""

from typing import Any

# Stage labels attached to per-record failures. They end up verbatim in the
# "skipped" log lines and in Skipped.reason, so keep them short and stable.
SEARCH_TRACK_STAGE = "search track"
ADD_TRACK_STAGE = "add track"


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, we store message as an attribute so code can inspect it without parsing str(exception).
    # Never raise this directly - use a specific subclass so callers can catch precisely.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class ValidationError(DomainException):
    """Input validation failed.

    Raised when the scrobble batch cannot be decoded (bad JSON, wrong shape,
    wrong field types). Fatal for the run.

    Example:
        raise ValidationError("Invalid scrobble batch: songs.0.loved: not a boolean")
    """

    pass


class ConfigurationError(DomainException):
    """Application misconfiguration.

    Raised when a setting or CLI override is missing or out of range.

    Example:
        raise ConfigurationError("workers must be >= 1, got 0")
    """

    pass


class InvalidStateException(DomainException):
    """Raised when an object is in an invalid state for the requested operation.

    Example: streaming a RecordSource that was already exhausted.
    """

    pass


class AuthenticationError(DomainException):
    """The web-player access token could not be obtained.

    Hey future me - this is almost always stale cookies. sp_dc/sp_key expire when the
    user logs out of the browser session they were copied from. The CLI prints the
    cookie instructions on --help, point the operator there.
    """

    def __init__(self, message: str, http_status: int | None = None) -> None:
        super().__init__(message)
        self.http_status = http_status


class ExternalServiceError(DomainException):
    """External service (Spotify) returned an error or could not be reached."""

    pass


# =============================================================================
# Per-record failures
# Hey future me - everything below is RECOVERABLE. The worker pool catches
# MatchError / MutateError, turns them into a Skipped outcome and moves on.
# Never let one of these escape a worker, and never catch anything broader there.
# =============================================================================


class MatchError(ExternalServiceError):
    """Searching the catalog for a record failed."""

    stage = SEARCH_TRACK_STAGE


class MatchTransportError(MatchError):
    """The search request could not be built, sent, or its body decoded."""

    pass


class MatchBadStatusError(MatchError):
    """The search endpoint answered with a non-success status."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"bad response status: {status_code}")
        self.status_code = status_code


class NoResultsError(MatchError):
    """The search returned no candidate track."""

    def __init__(self, message: str = "no results") -> None:
        super().__init__(message)


class MutateError(ExternalServiceError):
    """Saving a matched track to the library failed."""

    stage = ADD_TRACK_STAGE


class MutateTransportError(MutateError):
    """The save request could not be built or sent."""

    pass


class MutateBadStatusError(MutateError):
    """The save endpoint answered with a non-success status."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"bad response status: {status_code}")
        self.status_code = status_code


class ReportWriteError(DomainException):
    """The failure report could not be written. Fatal for the run."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


__all__ = [
    # Base
    "DomainException",
    # Input / config
    "ValidationError",
    "ConfigurationError",
    "InvalidStateException",
    # Auth
    "AuthenticationError",
    # External service
    "ExternalServiceError",
    "MatchError",
    "MatchTransportError",
    "MatchBadStatusError",
    "NoResultsError",
    "MutateError",
    "MutateTransportError",
    "MutateBadStatusError",
    # Output
    "ReportWriteError",
    # Stage labels
    "SEARCH_TRACK_STAGE",
    "ADD_TRACK_STAGE",
]
