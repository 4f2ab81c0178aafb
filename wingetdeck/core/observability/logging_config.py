"""
Logging configuration — central setup for the CLI and the server.

Called once at process start by ``wingetdeck.main``. Every module that
does ``logger = logging.getLogger(__name__)`` inherits this config.

Levels are resolved in precedence order:
    --debug / --verbose / --quiet  >  DECK_LOG_LEVEL  >  WARNING

The optional log file (DECK_LOG_FILE, level DECK_LOG_FILE_LEVEL) is the
operation log: append-only, one ``timestamp level message`` line per
install attempt, upgrade run and probe failure.
"""

from __future__ import annotations

import logging
import os
import sys

ENV_LEVEL = "DECK_LOG_LEVEL"
ENV_FILE = "DECK_LOG_FILE"
ENV_FILE_LEVEL = "DECK_LOG_FILE_LEVEL"

# ── Format strings ──────────────────────────────────────────────

# WARNING and above on the console: just the message
_FMT_MINIMAL = "%(message)s"

# INFO: time and logger name
_FMT_VERBOSE = "%(asctime)s [%(name)s] %(message)s"

# DEBUG: everything, with file:line
_FMT_DEBUG = "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d  %(message)s"

_DATEFMT_CONSOLE = "%H:%M:%S"

# Operation log file
_FMT_FILE = "%(asctime)s [%(levelname)s] %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

# werkzeug logs one line per request at INFO
_NOISY_LOGGERS = ("werkzeug", "urllib3")


def resolve_level(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Pick the console level from CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(ENV_LEVEL, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path of the operation log (opened in append mode).
        log_file_level: Level for the file. Defaults to INFO so install
            attempts are recorded even when the console is quiet.
        quiet_third_party: Keep werkzeug & co at WARNING unless at DEBUG.
    """
    numeric_level = _parse_level(level)

    if numeric_level <= logging.DEBUG:
        fmt, datefmt = _FMT_DEBUG, _DATEFMT_CONSOLE
    elif numeric_level <= logging.INFO:
        fmt, datefmt = _FMT_VERBOSE, _DATEFMT_CONSOLE
    else:
        fmt, datefmt = _FMT_MINIMAL, None

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)

    effective_level = numeric_level

    if log_file:
        file_level = _parse_level(log_file_level, default=logging.INFO)
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(effective_level)

    if quiet_third_party and numeric_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    # A broken handler must not take a request down with it
    logging.raiseExceptions = False


def _parse_level(level: str | None, default: int = logging.WARNING) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return default
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return default
    return numeric
