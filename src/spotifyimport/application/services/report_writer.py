"""ReportWriter - persists the skipped records of a run for replay."""

import json
import logging
import time
from collections.abc import Callable, Sequence
from pathlib import Path

from spotifyimport.domain.entities import Record
from spotifyimport.domain.exceptions import ReportWriteError
from spotifyimport.infrastructure.observability import format_oserror_message

logger = logging.getLogger(__name__)

REPORT_PREFIX = "failures_"


class ReportWriter:
    """Write failures_<unix-ts>.json into a directory.

    The file is a JSON array of records in the exact shape they were read in,
    which is also a valid input for the next run (Batch.from_json accepts a bare
    array). Fix the metadata by hand, pipe it back in, done.
    """

    def __init__(
        self, directory: Path | str = ".", clock: Callable[[], float] = time.time
    ) -> None:
        """
        Initialize writer.

        Args:
            directory: Where the report goes
            clock: Returns the current unix time (injectable for tests)
        """
        self._directory = Path(directory)
        self._clock = clock

    def report_path(self) -> Path:
        """Path the report would be written to right now."""
        return self._directory / f"{REPORT_PREFIX}{int(self._clock())}.json"

    def write(self, skipped: Sequence[Record]) -> Path | None:
        """Write the report if there is anything to report.

        Args:
            skipped: Records that ended as Skipped, in collection order

        Returns:
            Path of the written file, or None when nothing was skipped

        Raises:
            ReportWriteError: If the file cannot be created or written (fatal)
        """
        if not skipped:
            return None

        path = self.report_path()
        payload = json.dumps(
            [record.to_wire() for record in skipped], indent=2, ensure_ascii=False
        )

        try:
            path.write_text(payload + "\n", encoding="utf-8")
        except OSError as e:
            raise ReportWriteError(
                format_oserror_message(e, "write failure report", path), path=str(path)
            ) from e

        logger.debug("Wrote %d skipped records to %s", len(skipped), path)
        return path
