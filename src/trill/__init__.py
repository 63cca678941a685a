"""Trill — a static dev server that reloads your browser on every save.

Serves the current directory over HTTP, appends a small live-reload
client to every HTML page, watches the directory tree, and pushes a
reload signal over a WebSocket on the same port whenever a file changes.

Basic usage::

    from trill import App, AppConfig

    app = App(AppConfig(port=3000))
    app.run()

Or from a shell::

    trill serve --port 3000
"""

# Declare free-threading support (PEP 703)
_Py_mod_gil = 0

__version__ = "0.1.0.dev0"
__all__ = [
    "App",
    "AppConfig",
    "ChangeEvent",
    "ErrorKind",
    "FileWatcher",
    "HTTPError",
    "ListenFailure",
    "Middleware",
    "Next",
    "NotFound",
    "NotificationHub",
    "Request",
    "Response",
    "TrillError",
    "WatcherUnavailable",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import trill`` fast while providing a clean top-level API.
    """
    if name == "App":
        from trill.app import App

        return App

    if name == "AppConfig":
        from trill.config import AppConfig

        return AppConfig

    if name == "Request":
        from trill.http.request import Request

        return Request

    if name == "Response":
        from trill.http.response import Response

        return Response

    if name in ("Middleware", "Next"):
        from trill.middleware import protocol as _mw

        return getattr(_mw, name)

    if name == "NotificationHub":
        from trill.realtime.hub import NotificationHub

        return NotificationHub

    if name in ("ChangeEvent", "FileWatcher"):
        from trill.realtime import watcher as _watcher

        return getattr(_watcher, name)

    if name in (
        "ErrorKind",
        "HTTPError",
        "ListenFailure",
        "NotFound",
        "TrillError",
        "WatcherUnavailable",
    ):
        from trill import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
