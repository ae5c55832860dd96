"""Logging setup for the importer: text or JSON lines on stderr, tagged with a run/record id."""

import contextvars
import logging
import sys
import traceback
import uuid
from pathlib import Path
from typing import Any

from pythonjsonlogger import jsonlogger

PACKAGE_NAME = "spotifyimport"

# Hey future me, correlation IDs tie log lines together across the async tasks of a run.
# The use case sets one per run, and each worker overrides it with the record's ident
# while it handles that record - so the client's debug lines say WHICH scrobble they
# belong to. contextvars is asyncio-safe: every task gets its own copy of the context,
# a worker setting it never leaks into another worker.
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "spotifyimport_correlation_id", default=""
)


def get_correlation_id() -> str:
    """Return the id of the run or record being handled ("" outside a run)."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Tag the current task's log lines with `correlation_id`.

    Args:
        correlation_id: Record ident or run id. None mints a fresh UUID4 (one per run)

    Returns:
        The id now in effect
    """
    value = correlation_id if correlation_id is not None else str(uuid.uuid4())
    correlation_id_var.set(value)
    return value


# Runs on every log call. Never drops a record.
class CorrelationIdFilter(logging.Filter):
    """Stamp each record with the current correlation id."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_var.get()
        return True


# Our files sit under a "spotifyimport" directory whether the package runs from a
# checkout or from site-packages, so match on that path component.
def is_package_frame(filename: str) -> bool:
    """True if a traceback frame belongs to this package."""
    return PACKAGE_NAME in Path(filename).parts


class CompactExceptionFormatter(logging.Formatter):
    """Formatter that shows compact exception chains.

    Hey future me - this drops the "The above exception was the direct cause of the
    following exception" boilerplate and every frame outside our own package.

    Example output:
    12:00:01 │ ERROR   │ spotifyimport.cli:120 │ Import aborted: token request failed
    ╰─► ConnectError: All connection attempts failed
    ╰─► AuthenticationError: token request failed: All connection attempts failed
        File "spotify_client.py", line 190, in fetch_web_player_token
          raise AuthenticationError(f"token request failed: {e}") from e
    """

    def formatException(self, ei: Any) -> str:
        """Format exception chain in a compact, readable way.

        Args:
            ei: Exception info tuple (type, value, traceback)

        Returns:
            Formatted exception string, root cause first
        """
        _, exc_value, _ = ei
        if exc_value is None:
            return ""

        exceptions: list[BaseException] = []
        current: BaseException | None = exc_value
        while current is not None and current not in exceptions:
            exceptions.append(current)
            current = current.__cause__ or current.__context__
        exceptions.reverse()

        lines: list[str] = []
        for exc in exceptions:
            lines.append(f"╰─► {exc.__class__.__name__}: {exc}")
            if exc.__traceback__ is None:
                continue
            for frame in traceback.extract_tb(exc.__traceback__):
                if not is_package_frame(frame.filename):
                    continue
                lines.append(
                    f'    File "{Path(frame.filename).name}", line {frame.lineno}, '
                    f"in {frame.name}"
                )
                if frame.line:
                    lines.append(f"      {frame.line.strip()}")

        return "\n".join(lines)


class CustomJsonFormatter(jsonlogger.JsonFormatter):  # type: ignore[misc]
    """One JSON object per line, for piping a run's log into jq or a log shipper."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record.update(
            timestamp=self.formatTime(record, self.datefmt),
            level=record.levelname,
            logger=record.name,
            line=record.lineno,
        )
        # Empty outside a run (e.g. the accesstoken command), leave the key out then.
        if getattr(record, "correlation_id", ""):
            log_record["correlation_id"] = record.correlation_id
        else:
            log_record.pop("correlation_id", None)

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)


TEXT_FORMAT = "%(asctime)s │ %(levelname)-7s │ %(name)s:%(lineno)d │ %(message)s"
JSON_FORMAT = "%(timestamp)s %(level)s %(name)s %(message)s"

# These log every request at INFO/DEBUG - with 20 workers that drowns our own lines.
NOISY_LOGGERS = ("httpx", "httpcore", "asyncio")


# Listen future me, call this ONCE at startup (the CLI does). It replaces every handler on
# the root logger, which also makes it safe to call again from tests. Logs go to stderr
# because stdout is reserved for data (accesstoken prints the token there).
def configure_logging(
    log_level: str = "INFO",
    json_format: bool = False,
    app_name: str = PACKAGE_NAME,
) -> None:
    """Install the single stderr handler on the root logger.

    Args:
        log_level: Level name, case-insensitive. Unknown names fall back to INFO
        json_format: JSON lines instead of the compact text format
        app_name: Reported in the "Logging configured" debug line
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(
        CustomJsonFormatter(JSON_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        if json_format
        else CompactExceptionFormatter(fmt=TEXT_FORMAT, datefmt="%H:%M:%S")
    )

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        "Logging configured",
        extra={"app_name": app_name, "log_level": log_level, "json_format": json_format},
    )
