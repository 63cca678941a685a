"""Trill CLI — run the live-reloading dev server.

Entry point registered as ``trill`` in ``pyproject.toml``::

    [project.scripts]
    trill = "trill.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``trill`` command."""
    parser = argparse.ArgumentParser(
        prog="trill",
        description="Trill — a static dev server that reloads your browser on every save.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- trill serve -------------------------------------------------------
    serve_parser = subparsers.add_parser(
        "serve",
        help="Run a local development server with auto reload",
        description=(
            "Serve the current directory and reload connected browser pages "
            "whenever a file in it changes."
        ),
    )
    serve_parser.add_argument(
        "-p", "--port", type=int, default=None, help="Port on which the server should be started"
    )
    serve_parser.add_argument("--host", default=None, help="Bind host address")
    serve_parser.add_argument(
        "--root", default=None, help="Directory to serve (default: current directory)"
    )
    serve_parser.add_argument(
        "--no-open",
        action="store_true",
        help="Do not open the site in a browser",
    )
    serve_parser.add_argument(
        "--no-reload",
        action="store_true",
        help="Serve files without live reload",
    )
    serve_parser.add_argument(
        "--log-level",
        default=None,
        choices=("debug", "info", "warning", "error"),
        help="Logging verbosity",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "serve":
        from trill.cli._serve import serve

        serve(args)
