"""
Process entry point.

Binds the configured port and walks up to the next free one when it is
already taken; any other bind failure ends the process.
"""
from __future__ import annotations

import errno
import logging
import os
import socket
import sys

import uvicorn
from dotenv import find_dotenv, load_dotenv

from signin_form.core.config import get_settings
from signin_form.core.logging_config import configure_logging

logger = logging.getLogger(__name__)

MAX_PORT = 65535
LOG_LEVEL_ALIASES = {"warn": "warning", "fatal": "critical"}


def bind_socket(host: str, port: int) -> socket.socket:
    """Return a listening socket on the first free port starting at ``port``."""
    while True:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        # on Windows SO_REUSEADDR lets a second bind steal a port in use
        if os.name != "nt":
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
        except (OSError, OverflowError) as exc:
            sock.close()
            busy = isinstance(exc, OSError) and exc.errno == errno.EADDRINUSE
            if busy and port < MAX_PORT:
                logger.warning("Port %s is busy. Trying %s...", port, port + 1)
                port += 1
                continue
            raise
        sock.listen(128)
        return sock


def uvicorn_log_level(level: str) -> str:
    """Map a LOG_LEVEL value onto one of uvicorn's level names."""
    name = (level or "").strip().lower()
    name = LOG_LEVEL_ALIASES.get(name, name)
    return name if name in uvicorn.config.LOG_LEVELS else "info"


def main() -> None:
    load_dotenv(find_dotenv(usecwd=True))
    settings = get_settings()
    configure_logging(settings.log_level)
    try:
        sock = bind_socket(settings.host, settings.port)
    except (OSError, OverflowError) as exc:
        logger.error("Server failed to start: %s", exc)
        sys.exit(1)

    host, port = sock.getsockname()[:2]
    logger.info("Server running at http://%s:%s", host, port)
    config = uvicorn.Config(
        "signin_form.app:create_app",
        factory=True,
        log_level=uvicorn_log_level(settings.log_level),
    )
    server = uvicorn.Server(config)
    server.run(sockets=[sock])


if __name__ == "__main__":
    main()
