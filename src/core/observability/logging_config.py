"""
Logging configuration — set up once by ``main.py``.

Every module logs through ``logging.getLogger(__name__)``. Console
output goes to stderr so that stdout stays reserved for workflow
commands and ``--json`` output.

Levels are resolved in precedence order:
    CLI flag  >  IQTA_LOG_LEVEL env var  >  INFO (default)

Optional file output via IQTA_LOG_FILE / IQTA_LOG_FILE_LEVEL env vars.
"""

from __future__ import annotations

import logging
import sys

# ── Format strings ──────────────────────────────────────────────

# INFO and above: CI runners timestamp every line already
_FMT_CONSOLE = "%(message)s"

# DEBUG: which module said it, and where
_FMT_DEBUG = "%(levelname)-5s %(name)s:%(lineno)d — %(message)s"

# File output: always full detail
_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

# Libraries pulled in by pydantic/click that get chatty at DEBUG
_NOISY_LOGGERS = ("urllib3", "asyncio")


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Configure Python logging for the process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional path to a log file.
        log_file_level: Level for the log file (default: ``level``).
        quiet_third_party: Keep third-party loggers at WARNING.
    """
    numeric_level = _parse_level(level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(
        logging.Formatter(_FMT_DEBUG if numeric_level <= logging.DEBUG else _FMT_CONSOLE)
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)

    effective_level = numeric_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(effective_level)

    if quiet_third_party:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    # A handler whose stream was closed must not raise into the installer
    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Convert a level name to its numeric value (unknown → INFO)."""
    if not level:
        return logging.INFO
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.INFO
    return numeric
