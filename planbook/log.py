"""Logging setup for Planbook.

One named logger, ``planbook``, shared by every module through
``logging.getLogger(__name__)`` children. ``setup_logging`` attaches:

- a rotating file handler at ``planner/logs/<context>.log``
- a console handler (stderr), except for the ``tui`` context, where the
  terminal belongs to the interface

Records carry the run context so one log directory can hold the web server
and the terminal client side by side::

    2026-03-02 21:14:05,118 INFO [web] planbook.evening: saved planner 7 (12 activities)
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from planbook.workspace import logs_dir

logger = logging.getLogger("planbook")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(run_context)s] %(name)s: %(message)s"

_run_context = "imported"


class RunContextFilter(logging.Filter):
    """Stamp every record with the active run context."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_context = _run_context
        return True


def setup_logging(context: str = "imported", level: str = "INFO", root: Path | None = None) -> logging.Logger:
    """(Re)configure the planbook logger for a run context ('web', 'tui', 'test')."""
    global _run_context
    _run_context = context

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    formatter = logging.Formatter(LOG_FORMAT)

    try:
        directory = logs_dir(root)
        directory.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            str(directory / f"{context}.log"),
            maxBytes=2_000_000,
            backupCount=3,
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"planbook: file logging disabled ({e})\n")
    else:
        file_handler.setFormatter(formatter)
        file_handler.addFilter(RunContextFilter())
        logger.addHandler(file_handler)

    if context != "tui":
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        console_handler.addFilter(RunContextFilter())
        logger.addHandler(console_handler)

    return logger
