"""``trill serve`` — the development server command.

Builds an AppConfig from the flags, checks the served root is a
project, starts the server and opens the browser.
"""

import argparse
import dataclasses
import logging
import sys
import threading
import webbrowser
from pathlib import Path

from trill.app import App
from trill.config import AppConfig
from trill.errors import ListenFailure, ProjectMissing
from trill.server.dev import ensure_port_available

logger = logging.getLogger("trill.server")


def config_from_args(args: argparse.Namespace, base: AppConfig | None = None) -> AppConfig:
    """CLI flags override the config defaults."""
    config = base or AppConfig()
    overrides: dict[str, object] = {}
    if args.port is not None:
        overrides["port"] = args.port
    if args.host is not None:
        overrides["host"] = args.host
    if args.root is not None:
        overrides["root"] = Path(args.root)
    if args.no_open:
        overrides["open_browser"] = False
    if args.no_reload:
        overrides["live_reload"] = False
    if args.log_level is not None:
        overrides["log_level"] = args.log_level
    return dataclasses.replace(config, **overrides)


def check_project(config: AppConfig) -> None:
    """Raise ProjectMissing unless the served root holds the project marker."""
    if config.project_marker is None:
        return
    if not (Path(config.root) / config.project_marker).is_file():
        raise ProjectMissing(config.project_marker)


def configure_logging(level: str) -> None:
    logging.basicConfig(format="%(message)s")
    logging.getLogger("trill").setLevel(level.upper())


def open_browser_later(url: str, delay: float = 0.5) -> threading.Timer:
    """Open *url* once the server has had a moment to bind."""
    timer = threading.Timer(delay, webbrowser.open, args=(url,))
    timer.daemon = True
    timer.start()
    return timer


def serve(args: argparse.Namespace) -> None:
    """Run the dev server until interrupted.

    A missing project marker is reported and the command returns
    without serving. A port that cannot be bound exits with status 1.
    """
    config = config_from_args(args)
    configure_logging(config.log_level)

    try:
        check_project(config)
    except ProjectMissing as exc:
        print(exc, file=sys.stderr)
        return

    app = App(config)
    try:
        ensure_port_available(config.host, config.port)
        print(f"Development server has been started on {config.port}\n")
        if config.open_browser:
            open_browser_later(f"http://localhost:{config.port}")
        app.run()
    except ListenFailure as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    except KeyboardInterrupt:
        logger.info("Shutting down")
