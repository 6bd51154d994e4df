"""Logging setup for the web process."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Send application logs to stdout and quiet the pymongo internals."""
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # pymongo logs every heartbeat and server selection at DEBUG/INFO
    for name in ("pymongo.topology", "pymongo.serverSelection", "pymongo.connection", "pymongo.command"):
        logging.getLogger(name).setLevel(logging.WARNING)
