"""Debug logging for hook runs.

Hooks share stdout with the decision payload, so logs only ever go to a
per-session file, and only when debugging is switched on (``RUFIO_DEBUG`` or
running inside a Zellij pane).
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rufio.settings import EngineSettings

LOG_FORMAT = "[%(asctime)s] %(name)s %(levelname)s: %(message)s"
MAX_BYTES = 1024 * 1024
BACKUP_COUNT = 2


def debug_enabled(settings: EngineSettings) -> bool:
    return settings.debug or "ZELLIJ_PANE_ID" in os.environ


def log_path(session_id: str, settings: EngineSettings) -> Path:
    safe = "".join(c if c.isalnum() or c in "-_" else "_" for c in session_id) or "default"
    return settings.log_dir / f"rufio-{safe}.log"


def configure_logging(session_id: str, settings: EngineSettings) -> logging.Logger:
    """Point the `rufio` logger at the session log file, or silence it."""
    root_logger = logging.getLogger("rufio")
    for old in root_logger.handlers:
        old.close()
    root_logger.handlers.clear()
    root_logger.propagate = False

    if not debug_enabled(settings):
        root_logger.addHandler(logging.NullHandler())
        return root_logger

    path = log_path(session_id, settings)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = RotatingFileHandler(
            path, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8"
        )
    except OSError:
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG)
    return root_logger
