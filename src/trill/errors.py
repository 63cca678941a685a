"""Trill exception hierarchy.

Every trill error carries an ``ErrorKind`` so call sites can dispatch
on the kind with an exhaustive ``match`` instead of string codes.
"""

from dataclasses import dataclass
from enum import StrEnum


class ErrorKind(StrEnum):
    """The failure taxonomy of the dev server."""

    NOT_FOUND = "not-found"
    PERMISSION_OR_IO = "permission-or-io"
    WATCHER_UNAVAILABLE = "watcher-unavailable"
    LISTEN_FAILURE = "listen-failure"
    CLIENT_SEND_FAILURE = "client-send-failure"
    PROJECT_MISSING = "project-missing"


class TrillError(Exception):
    """Base for all trill-specific errors."""

    kind: ErrorKind | None = None


@dataclass(frozen=True, slots=True)
class HTTPError(TrillError):
    """An error that maps directly to an HTTP status code.

    Raised by middleware and the static file handler. The request
    pipeline converts these into responses in ``trill.server.errors``.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — the requested path does not resolve to a file under the served root."""

    kind = ErrorKind.NOT_FOUND
    code = "NOT-FOUND"

    def __init__(self, detail: str = "Requested file not found on the directory.") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405 — static files are only served for GET and HEAD."""

    def __init__(self, allowed: frozenset[str]) -> None:
        allow_value = ", ".join(sorted(allowed))
        super().__init__(
            status=405,
            detail=f"Method not allowed. Allowed methods: {allow_value}",
            headers=(("Allow", allow_value),),
        )


class AssetReadError(TrillError):
    """A file exists but could not be read (permissions, I/O error)."""

    kind = ErrorKind.PERMISSION_OR_IO

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path}: {reason}")


class WatcherUnavailable(TrillError):  # noqa: N818
    """A recursive watch could not be established on the served root.

    Live reload is disabled; static serving continues.
    """

    kind = ErrorKind.WATCHER_UNAVAILABLE


class ListenFailure(TrillError):
    """The server could not bind its listening socket (e.g. port in use)."""

    kind = ErrorKind.LISTEN_FAILURE

    def __init__(self, host: str, port: int, reason: str) -> None:
        self.host = host
        self.port = port
        self.reason = reason
        super().__init__(f"Cannot listen on {host}:{port}: {reason}")


class ClientSendFailure(TrillError):
    """Sending to one live-reload client failed. Never propagates past the hub."""

    kind = ErrorKind.CLIENT_SEND_FAILURE

    def __init__(self, client_id: str, reason: str = "") -> None:
        self.client_id = client_id
        super().__init__(f"Send to client {client_id} failed: {reason}" if reason else client_id)


class ProjectMissing(TrillError):  # noqa: N818
    """The served root has no project marker file."""

    kind = ErrorKind.PROJECT_MISSING

    def __init__(self, marker: str) -> None:
        self.marker = marker
        super().__init__("This directory is not associated with a project.")
