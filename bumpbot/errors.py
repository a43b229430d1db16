"""
Error types and error logging for bumpbot.

Every failure the pipeline can raise is fatal and never retried; the caller
re-runs the whole pipeline instead. The CLI logs full stack traces to a file
while showing clean messages to users.
"""

import os
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence


class BumpError(Exception):
    """Base class for bumpbot failures."""


class FormatError(BumpError, ValueError):
    """Malformed local or remote content (empty marker, empty feed, bad JSON)."""


class InvalidSemverError(FormatError):
    """A tag that does not start with ``[v]MAJOR.MINOR.PATCH``."""

    def __init__(self, tag: str):
        self.tag = tag
        super().__init__(f"given tag is not valid semver: {tag}")


class ConfigError(BumpError, ValueError):
    """Missing or invalid run parameters or configuration file."""


class _CommandError(BumpError):
    """A subprocess exited non-zero (or could not be started)."""

    label = "command"

    def __init__(self, args: Sequence[str], returncode: Optional[int], detail: str = ""):
        self.args_list = list(args)
        self.returncode = returncode
        message = f"{self.label} failed: {' '.join(self.args_list)}"
        if returncode is not None:
            message += f" (exit {returncode})"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class VcsError(_CommandError):
    """Non-zero exit from a version-control invocation."""

    label = "git"


class ToolError(_CommandError):
    """Non-zero exit from the dependency-sync, format or install tool."""

    label = "tool"


class UpstreamError(BumpError):
    """Non-success response (or transport failure) from the release-hosting API."""

    def __init__(self, message: str, *, status: Optional[int] = None, body: str = ""):
        self.status = status
        self.body = body
        if status is not None:
            message = f"{message}: status={status}, error={body}"
        super().__init__(message)


def _error_log_path() -> Path:
    """Resolve error log path, respecting BUMPBOT_HOME."""
    home = os.environ.get("BUMPBOT_HOME")
    if home:
        return Path(home) / "bumpbot-errors.log"
    return Path.home() / ".bumpbot" / "bumpbot-errors.log"


def log_exception(exc: Exception, context: str = "") -> Path:
    """
    Log exception with full traceback to file.

    Args:
        exc: The exception that occurred
        context: Optional context string (e.g., command name)

    Returns:
        Path to the error log file
    """
    log_path = _error_log_path()
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(log_path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o600)
        with os.fdopen(fd, "a") as f:
            f.write(f"\n{'='*60}\n")
            f.write(f"[{timestamp}]")
            if context:
                f.write(f" {context}")
            f.write("\n")
            f.write("".join(traceback.format_exception(exc)))
    except OSError:
        pass  # Can't write error log, don't crash over it
    return log_path
