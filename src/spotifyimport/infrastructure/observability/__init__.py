"""Observability infrastructure for logging."""

from spotifyimport.infrastructure.observability.error_formatting import (
    format_oserror_message,
)
from spotifyimport.infrastructure.observability.logging import (
    configure_logging,
    get_correlation_id,
    set_correlation_id,
)

__all__ = [
    "configure_logging",
    "format_oserror_message",
    "get_correlation_id",
    "set_correlation_id",
]
