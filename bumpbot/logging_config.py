"""
Logging configuration for bumpbot.

Progress messages from the ``bumpbot`` loggers go to stderr at INFO; HTTP
library chatter is suppressed unless debug mode is on.
"""

import logging
import sys
import warnings
from logging.handlers import RotatingFileHandler
from pathlib import Path

_LIBRARY_LOGGERS = ("httpx", "httpcore")


def _stderr_handler(root_logger: logging.Logger):
    for h in root_logger.handlers:
        if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr:
            return h
    return None


def configure_quiet_mode(quiet: bool = True):
    """
    Configure logging for normal runs.

    Shows bumpbot's own progress (INFO) on stderr without timestamps and
    silences library warnings and HTTP request logs.

    Args:
        quiet: If True, suppress library output. If False, leave it alone.
    """
    bump_logger = logging.getLogger("bumpbot")
    if bump_logger.level == logging.NOTSET:
        bump_logger.setLevel(logging.INFO)
    if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
               for h in bump_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(message)s"))
        bump_logger.addHandler(handler)

    if quiet:
        warnings.filterwarnings("ignore")
        for name in _LIBRARY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def enable_debug_mode():
    """Enable debug-level logging to stderr."""
    # Re-enable warnings
    warnings.filterwarnings("default")

    # Route everything through the root logger instead of the plain bumpbot handler
    bump_logger = logging.getLogger("bumpbot")
    for h in list(bump_logger.handlers):
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler):
            bump_logger.removeHandler(h)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    if _stderr_handler(root_logger) is None:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%H:%M:%S"
        ))
        root_logger.addHandler(handler)

    for name in ("bumpbot", *_LIBRARY_LOGGERS):
        logging.getLogger(name).setLevel(logging.DEBUG)


def configure_run_log(log_path):
    """Append a persistent log of runs to ``log_path``.

    Uses a rotating file handler (1MB max, 3 backups). Returns the handler
    so it can be removed when the run ends.
    """
    log_path = Path(log_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        str(log_path),
        maxBytes=1_000_000,
        backupCount=3,
    )
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    bump_logger = logging.getLogger("bumpbot")
    bump_logger.addHandler(handler)
    if bump_logger.level == logging.NOTSET or bump_logger.level > logging.INFO:
        bump_logger.setLevel(logging.INFO)

    return handler
