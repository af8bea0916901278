"""Logging for codeassist.

The package logs through the ``codeassist`` logger and its children
(``codeassist.completion``, ``codeassist.transform``, ...). The plugin host
calls ``setup_logging`` once with the loaded ``LoggingConfig``:

- ``verbose`` (0..4) selects error, warning, info, verbose or trace output and
  wins over ``level``
- records go to ``file`` (or ``$CA_LOG``) when set, else to stderr when it is
  an interactive console; editor hosts pipe stderr, so nothing is written there
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from codeassist.config.schema import LoggingConfig

TRACE = 5
VERBOSE = 15

logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(VERBOSE, "VERBOSE")

logger = logging.getLogger("codeassist")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s]: %(message)s"
DATE_FORMAT = "%H:%M:%S"

_initialized = False

_NAMED_LEVELS = {
    name: logging.getLevelName(name)
    for name in ("TRACE", "DEBUG", "VERBOSE", "INFO", "WARNING", "ERROR", "CRITICAL")
}
_NAMED_LEVELS["WARN"] = logging.WARNING

_VERBOSITY_LEVELS = (logging.ERROR, logging.WARNING, logging.INFO, VERBOSE, TRACE)


class _LowercaseLevelFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        record.levelname = record.levelname.lower()
        return super().format(record)


def resolve_level(config: LoggingConfig | None) -> int:
    """Effective level for a logging config (INFO when unset or unknown)."""
    if config is None:
        return logging.INFO
    if config.verbose is not None:
        index = min(max(config.verbose, 0), len(_VERBOSITY_LEVELS) - 1)
        return _VERBOSITY_LEVELS[index]
    if config.level:
        return _NAMED_LEVELS.get(config.level.upper(), logging.INFO)
    return logging.INFO


def resolve_log_path(config: LoggingConfig | None) -> str | None:
    """Log file from config, falling back to ``$CA_LOG``; ``~`` is expanded."""
    path = (config.file if config else None) or os.environ.get("CA_LOG")
    return os.path.expanduser(path) if path else None


def _open_handler(log_path: str | None) -> logging.Handler | None:
    if log_path:
        try:
            return logging.FileHandler(log_path, mode="a", encoding="utf-8")
        except OSError as e:
            if not sys.stderr.isatty():
                return None
            print(f"[codeassist] Failed to open log file {log_path}: {e}", file=sys.stderr)
    return logging.StreamHandler(sys.stderr) if sys.stderr.isatty() else None


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Configure the package logger. Only the first call has an effect."""
    global _initialized
    if _initialized:
        return
    _initialized = True

    level = resolve_level(config)
    logger.setLevel(level)

    handler = _open_handler(resolve_log_path(config))
    if handler is None:
        return
    handler.setLevel(level)
    handler.setFormatter(_LowercaseLevelFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)


def get_logger(name: str | None = None) -> logging.Logger:
    """Child logger ``codeassist.<name>``, or the package logger itself."""
    return logger.getChild(name) if name else logger
