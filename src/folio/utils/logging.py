"""Logging handlers for the dialog shell: one rotating log file plus stderr."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Iterable

__all__ = ["LOG_FORMAT", "setup_logging", "shutdown_logging"]

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_installed: list[logging.Handler] = []


def setup_logging(
    log_path: Path,
    level: int = logging.INFO,
    *,
    console: bool = True,
    quiet: Iterable[str] = (),
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
    force: bool = False,
) -> Path:
    """Attach rotating file and console handlers to the root logger.

    Handlers installed here are tracked so a repeated call is a no-op unless
    ``force`` is set, in which case they are swapped for fresh ones. Handlers
    added by anything else (test harnesses, embedding applications) are left
    alone. Loggers named in ``quiet`` are held at ``WARNING`` or above.
    """

    if _installed and not force:
        return _current_log_path() or log_path
    shutdown_logging()

    log_path.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=_DATE_FORMAT)
    handlers: list[logging.Handler] = [
        logging.handlers.RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())

    root = logging.getLogger()
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(level)
    logging.captureWarnings(True)

    quiet_level = max(level, logging.WARNING)
    for name in quiet:
        logging.getLogger(name).setLevel(quiet_level)

    _installed.extend(handlers)
    return log_path


def shutdown_logging() -> None:
    """Detach and close the handlers installed by :func:`setup_logging`."""

    root = logging.getLogger()
    while _installed:
        handler = _installed.pop()
        root.removeHandler(handler)
        handler.close()


def _current_log_path() -> Path | None:
    for handler in _installed:
        if isinstance(handler, logging.handlers.RotatingFileHandler):
            return Path(handler.baseFilename)
    return None
