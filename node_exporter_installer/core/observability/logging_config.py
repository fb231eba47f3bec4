"""
Logging setup for the CLI.

``main.py`` calls ``setup_logging`` once from the group callback;
modules log through ``logging.getLogger(__name__)``.

Console level: ``--debug`` > ``--verbose`` > ``--quiet`` >
``NEI_LOG_LEVEL`` > WARNING. A log file can be added with
``NEI_LOG_FILE`` (level ``NEI_LOG_FILE_LEVEL``, default: same as the
console). Progress the operator should see is echoed by the CLI, not
logged, so the default console stays quiet.
"""

from __future__ import annotations

import logging
import os
import sys

_DATEFMT = "%H:%M:%S"

# Console format by threshold: more context the lower the level.
_CONSOLE_FORMATS = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s"),
)
_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s"


def _to_level(name: str | None) -> int:
    level = logging.getLevelName(name.upper()) if name else None
    return level if isinstance(level, int) else logging.WARNING


def _console_formatter(level: int) -> logging.Formatter:
    for threshold, fmt in _CONSOLE_FORMATS:
        if level <= threshold:
            return logging.Formatter(fmt, datefmt=_DATEFMT)
    return logging.Formatter("%(message)s")


def resolve_level(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Console level from the CLI flags, falling back to NEI_LOG_LEVEL."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get("NEI_LOG_LEVEL", "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """(Re)configure the root logger.

    Args:
        level: Console level name.
        log_file: Also log to this file.
        log_file_level: Level for the file; defaults to ``level``.
    """
    console_level = _to_level(level)
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(_console_formatter(console_level))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    if log_file:
        file_level = _to_level(log_file_level) if log_file_level else console_level
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setLevel(file_level)
        handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)
        root_level = min(root_level, file_level)

    root.setLevel(root_level)
    logging.raiseExceptions = False
