"""
Logging configuration — central setup for the installer CLI.

Called once at startup by the root click group.  Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Console level, first match wins:
    --debug  >  --verbose  >  --quiet  >  SV2_LOG_LEVEL  >  WARNING

An install run is usually interactive, so the console stays quiet at
WARNING while an optional log file (SV2_LOG_FILE, at SV2_LOG_FILE_LEVEL)
keeps the full trail of URLs tried and files written.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

LOG_LEVEL_ENV = "SV2_LOG_LEVEL"
LOG_FILE_ENV = "SV2_LOG_FILE"
LOG_FILE_LEVEL_ENV = "SV2_LOG_FILE_LEVEL"

# Console formats, most detailed first: (max level, format, datefmt)
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
)
_CONSOLE_DEFAULT_FORMAT = "%(levelname)s: %(message)s"

_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def resolve_console_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
) -> str:
    """Pick the console level name from CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(LOG_LEVEL_ENV, "WARNING")


def _console_formatter(level: int) -> logging.Formatter:
    for max_level, fmt, datefmt in _CONSOLE_FORMATS:
        if level <= max_level:
            return logging.Formatter(fmt, datefmt=datefmt)
    return logging.Formatter(_CONSOLE_DEFAULT_FORMAT)


def _open_log_file(path: str, level: int) -> logging.Handler:
    log_path = Path(path).expanduser()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
    return handler


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file. An unusable path is reported
            on the console and skipped; it never aborts the run.
        log_file_level: Level for the log file. Defaults to ``level``.
    """
    console_level = _parse_level(level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(_console_formatter(console_level))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root.setLevel(console_level)

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        try:
            root.addHandler(_open_log_file(log_file, file_level))
        except OSError as exc:
            logging.getLogger(__name__).warning("Cannot open log file %s: %s", log_file, exc)
        else:
            root.setLevel(min(console_level, file_level))

    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant (WARNING if unknown)."""
    numeric = logging.getLevelName(level.upper()) if level else None
    return numeric if isinstance(numeric, int) else logging.WARNING
