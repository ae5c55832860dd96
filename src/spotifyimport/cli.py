"""Command line entry points: `spotifyimport` and `accesstoken`."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from spotifyimport.application.services import (
    LibraryMutator,
    ReportWriter,
    TrackMatcher,
)
from spotifyimport.application.use_cases import (
    ImportScrobblesRequest,
    ImportScrobblesUseCase,
)
from spotifyimport.config import Settings, get_settings
from spotifyimport.domain.entities import AccessToken, Batch, ImportSummary
from spotifyimport.domain.exceptions import (
    ConfigurationError,
    DomainException,
    ValidationError,
)
from spotifyimport.infrastructure.integrations import SpotifyClient
from spotifyimport.infrastructure.observability import configure_logging

logger = logging.getLogger(__name__)

SP_DC_INSTRUCTIONS = """\
To obtain SP_DC and SP_KEY:
1. open a new incognito window in a browser at: https://accounts.spotify.com/en/login?continue=https:%2F%2Fopen.spotify.com%2F
2. open Developer Tools in your browser and select the 'Application' tab
3. login to Spotify
4. search/filter for `sp_dc` under Cookies > https://open.spotify.com
5. repeat step 4 for `sp_key`
6. close the window without logging out"""


def _add_cookie_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("sp_dc", metavar="SP_DC", help="Value of the sp_dc cookie.")
    parser.add_argument("sp_key", metavar="SP_KEY", help="Value of the sp_key cookie.")


def _add_logging_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (e.g., DEBUG, INFO, WARNING). Defaults to settings.",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        default=None,
        help="Emit JSON log lines instead of human-readable ones.",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Build the `spotifyimport` argument parser."""
    parser = argparse.ArgumentParser(
        prog="spotifyimport",
        description=(
            "Match a scrobble export (JSON on stdin) against the Spotify catalog "
            "and, with --save, add every match to your Liked Songs."
        ),
        epilog=SP_DC_INSTRUCTIONS,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_cookie_arguments(parser)
    parser.add_argument(
        "-s",
        "--save",
        action="store_true",
        help="Save matched tracks to the library. Without it the run only reports.",
    )
    parser.add_argument(
        "-w",
        "--workers",
        type=int,
        default=None,
        help="Number of concurrent workers. Defaults to settings (20).",
    )
    parser.add_argument(
        "-i",
        "--input",
        default="-",
        help="Scrobble export to read, '-' for stdin (default).",
    )
    parser.add_argument(
        "-o",
        "--report-dir",
        type=Path,
        default=None,
        help="Directory for failures_<ts>.json. Defaults to settings (cwd).",
    )
    _add_logging_arguments(parser)
    return parser


def _build_token_parser() -> argparse.ArgumentParser:
    """Build the `accesstoken` argument parser."""
    parser = argparse.ArgumentParser(
        prog="accesstoken",
        description="Print a Spotify web-player bearer token for the given cookies.",
        epilog=SP_DC_INSTRUCTIONS,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_cookie_arguments(parser)
    parser.add_argument(
        "--expiry",
        action="store_true",
        help="Also print the token's expiry timestamp (ISO 8601, UTC).",
    )
    _add_logging_arguments(parser)
    return parser


def _configure_logging(args: argparse.Namespace, settings: Settings) -> None:
    configure_logging(
        log_level=args.log_level or settings.observability.log_level,
        json_format=(
            args.json_logs
            if args.json_logs is not None
            else settings.observability.log_json_format
        ),
    )


def _load_settings(args: argparse.Namespace) -> Settings:
    """Load settings and set up logging from them.

    Raises:
        ConfigurationError: If an environment or .env value is invalid
    """
    try:
        settings = get_settings()
    except PydanticValidationError as e:
        # No settings to read the log options from, fall back to the CLI flags.
        configure_logging(
            log_level=args.log_level or "INFO", json_format=bool(args.json_logs)
        )
        raise ConfigurationError(
            "Invalid settings: "
            + "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
        ) from e

    _configure_logging(args, settings)
    return settings


def _read_batch(source: str) -> Batch:
    """Read and decode the scrobble export.

    Raises:
        ValidationError: If the input cannot be read or decoded
    """
    try:
        if source == "-":
            text = sys.stdin.read()
        else:
            text = Path(source).read_text(encoding="utf-8")
    except OSError as e:
        raise ValidationError(f"Cannot read scrobble batch from {source}: {e}") from e
    return Batch.from_json(text)


async def _fetch_token(client: SpotifyClient, sp_dc: str, sp_key: str) -> AccessToken:
    token = await client.fetch_web_player_token(sp_dc, sp_key)
    logger.info("Got access token, valid until %s", token.expires_at.isoformat())
    return token


async def _run_import(
    args: argparse.Namespace, settings: Settings, batch: Batch, workers: int
) -> ImportSummary:
    report_dir = args.report_dir or settings.pipeline.report_dir

    async with SpotifyClient(settings.spotify, max_connections=workers) as client:
        token = await _fetch_token(client, args.sp_dc, args.sp_key)

        use_case = ImportScrobblesUseCase(
            matcher=TrackMatcher(client, include_year=settings.pipeline.include_year),
            mutator=LibraryMutator(client),
            report_writer=ReportWriter(report_dir),
            workers=workers,
        )
        return await use_case.execute(
            ImportScrobblesRequest(
                batch=batch, access_token=token.access_token, save=args.save
            )
        )


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of `spotifyimport`.

    Returns:
        0 on success, 1 on any fatal error. argparse exits with 2 on usage errors.
    """
    args = _build_parser().parse_args(argv)

    try:
        settings = _load_settings(args)
        workers = (
            args.workers if args.workers is not None else settings.pipeline.workers
        )
        if workers < 1:
            raise ConfigurationError(f"workers must be >= 1, got {workers}")

        batch = _read_batch(args.input)
        asyncio.run(_run_import(args, settings, batch, workers))
    except DomainException as e:
        logger.error(
            "Import aborted: %s",
            e.message,
            exc_info=logger.isEnabledFor(logging.DEBUG),
        )
        return 1
    except KeyboardInterrupt:
        logger.error("Import interrupted")
        return 1

    return 0


async def _print_token(args: argparse.Namespace, settings: Settings) -> None:
    async with SpotifyClient(settings.spotify, max_connections=1) as client:
        token = await client.fetch_web_player_token(args.sp_dc, args.sp_key)
    print(token.access_token)
    if args.expiry:
        print(token.expires_at.isoformat())


def token_main(argv: Sequence[str] | None = None) -> int:
    """Entry point of `accesstoken`.

    Returns:
        0 on success, 1 on invalid settings or if the token could not be fetched.
    """
    args = _build_token_parser().parse_args(argv)

    try:
        settings = _load_settings(args)
        asyncio.run(_print_token(args, settings))
    except DomainException as e:
        logger.error("Token fetch failed: %s", e.message)
        return 1

    return 0
