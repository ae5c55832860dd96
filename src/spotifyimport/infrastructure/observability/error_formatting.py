"""Human-readable formatting for filesystem errors.

The importer touches the filesystem exactly once per run (the failure report),
and that write is fatal when it fails. The operator should see WHY, not just
"[Errno 13]".
"""

import errno
from pathlib import Path

# Maps errno codes to a short description plus what to do about it.
ERRNO_MESSAGES: dict[int, tuple[str, str]] = {
    errno.EACCES: (
        "Permission denied",
        "Pick a writable directory with --report-dir or fix the directory permissions.",
    ),
    errno.EROFS: (
        "Read-only filesystem",
        "The report directory is on a read-only mount. Use --report-dir elsewhere.",
    ),
    errno.ENOSPC: (
        "No space left on device",
        "Disk is full! Check available space with 'df -h'.",
    ),
    errno.ENOENT: (
        "File or directory not found",
        "The report directory does not exist. Create it or pass another --report-dir.",
    ),
    errno.ENOTDIR: (
        "Not a directory",
        "--report-dir points at a file, not a directory.",
    ),
    errno.EISDIR: (
        "Is a directory",
        "A directory already exists with the report's file name.",
    ),
}


def format_oserror_message(
    e: OSError,
    operation: str,
    path: Path | str | None = None,
) -> str:
    """Format OSError with human-readable explanation and a hint.

    Example:
        Failed to write failure report '/ro/failures_1700000000.json':
        Read-only filesystem (Errno 30 / EROFS)
        HINT: The report directory is on a read-only mount. Use --report-dir elsewhere.

    Args:
        e: The OSError exception
        operation: What was being attempted (e.g., "write failure report")
        path: The file/directory path involved

    Returns:
        Formatted error message with errno, description and hint
    """
    error_code = e.errno
    error_name = (
        errno.errorcode.get(error_code, f"UNKNOWN_{error_code}")
        if error_code is not None
        else "UNKNOWN"
    )

    if error_code in ERRNO_MESSAGES:
        description, hint = ERRNO_MESSAGES[error_code]
    else:
        description = e.strerror or str(e)
        hint = "Check file permissions and free disk space."

    parts = [f"Failed to {operation}"]
    if path:
        parts.append(f"'{path}'")
    parts.append(f": {description} (Errno {error_code} / {error_name})")
    base_message = " ".join(parts[:-1]) + parts[-1]

    return f"{base_message}\nHINT: {hint}"
