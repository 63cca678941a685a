"""Development server.

Starts a pounce ASGI server with the live trill App object. Always a
single worker: the broadcaster and every live-reload WebSocket must
share one event loop.
"""

from __future__ import annotations

import logging
import socket
import sys
from typing import TYPE_CHECKING

from trill.errors import ListenFailure

if TYPE_CHECKING:
    from trill.app import App

logger = logging.getLogger("trill.server")


def ensure_port_available(host: str, port: int) -> None:
    """Fail fast if *host*:*port* cannot be bound.

    Binds a probe socket and closes it again, so nothing is left
    listening when the port is taken.

    Raises:
        ListenFailure: If the address is in use or cannot be bound.
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    try:
        with socket.socket(family, socket.SOCK_STREAM) as probe:
            if sys.platform != "win32":
                # Ignore TIME_WAIT leftovers from a previous run; a live
                # listener still makes bind() fail.
                probe.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            probe.bind((host, port))
    except OSError as exc:
        raise ListenFailure(host, port, exc.strerror or str(exc)) from exc


def run_dev_server(app: App, host: str, port: int) -> None:
    """Start a pounce server for *app* and block until it stops.

    Pounce's ``run()`` takes an import string, but trill has a live
    ``App`` object. We use ``pounce.Server`` directly with the ASGI
    callable.

    Raises:
        ListenFailure: If the listening socket cannot be bound.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    ensure_port_available(host, port)

    config = ServerConfig(host=host, port=port, workers=1, reload=False)
    server = Server(config, app)
    logger.debug("Starting pounce on %s:%d", host, port)
    try:
        server.run()
    except OSError as exc:
        raise ListenFailure(host, port, exc.strerror or str(exc)) from exc
