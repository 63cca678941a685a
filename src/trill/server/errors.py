"""Error handling pipeline for trill requests.

Maps trill errors and unexpected failures to JSON error responses.
Per-request errors stay inside their response; nothing here raises.
"""

import logging

from trill.errors import ErrorKind, HTTPError, NotFound, TrillError
from trill.http.request import Request
from trill.http.response import Response, json_response

logger = logging.getLogger("trill.server")

INTERNAL_ERROR_BODY = {"code": "INTERNAL-ERROR", "message": "Internal server error."}


def error_body(code: str, message: str) -> dict[str, str]:
    return {"code": code, "message": message}


def not_found_response(exc: NotFound | None = None) -> Response:
    """The 404 contract: ``{"code":"NOT-FOUND","message":...}``."""
    exc = exc or NotFound()
    return json_response(error_body(NotFound.code, exc.detail), status=404)


def internal_error_response() -> Response:
    return json_response(INTERNAL_ERROR_BODY, status=500)


def error_response(exc: Exception, request: Request) -> Response:
    """Convert an exception raised while serving *request* into a response."""
    if isinstance(exc, NotFound):
        return not_found_response(exc)

    if isinstance(exc, HTTPError):
        logger.debug("%d %s %s — %s", exc.status, request.method, request.path, exc.detail)
        code = f"HTTP-{exc.status}"
        response = json_response(error_body(code, exc.detail), status=exc.status)
        for name, value in exc.headers:
            response = response.with_header(name, value)
        return response

    if isinstance(exc, TrillError):
        match exc.kind:
            case ErrorKind.NOT_FOUND:
                return not_found_response()
            case ErrorKind.PERMISSION_OR_IO:
                logger.error("%s %s — %s", request.method, request.path, exc, exc_info=exc)
                return internal_error_response()
            case (
                ErrorKind.WATCHER_UNAVAILABLE
                | ErrorKind.LISTEN_FAILURE
                | ErrorKind.CLIENT_SEND_FAILURE
                | ErrorKind.PROJECT_MISSING
                | None
            ):
                # Process-level kinds never belong to a request
                pass

    logger.exception("Unhandled error serving %s %s", request.method, request.path, exc_info=exc)
    return internal_error_response()
