"""Logging configuration for medianote.

Each invocation is one short-lived command, so every file log line carries the
subcommand that wrote it (``import``, ``link``, ``session``...). Logs go to:

- ~/.config/medianote/medianote.log (DEBUG and up, 5 MB cap, 2 backups)
- stderr (warnings and up unless --debug, so command output stays clean)
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_DIR = Path.home() / ".config" / "medianote"
LOG_FILE = LOG_DIR / "medianote.log"

_LOG_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
_LOG_BACKUP_COUNT = 2

FILE_FORMAT = "%(asctime)s %(levelname)-8s [%(command)s] %(name)s: %(message)s"


class CommandContextFilter(logging.Filter):
    """Stamp records with the running subcommand name."""

    def __init__(self, command: str | None) -> None:
        super().__init__()
        self.command = command or "-"

    def filter(self, record: logging.LogRecord) -> bool:
        record.command = self.command
        return True


def setup_logging(debug: bool = False, command: str | None = None) -> None:
    """Configure the ``medianote`` logger for one invocation.

    Calling it again replaces the handlers from the previous call, which
    matters when several commands run in one process (the test suite).
    """
    LOG_DIR.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger("medianote")
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    fh = RotatingFileHandler(
        str(LOG_FILE),
        maxBytes=_LOG_MAX_BYTES,
        backupCount=_LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    fh.setLevel(logging.DEBUG)
    fh.addFilter(CommandContextFilter(command))
    fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(fh)

    sh = logging.StreamHandler()
    sh.setLevel(logging.DEBUG if debug else logging.WARNING)
    sh.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    root.addHandler(sh)
