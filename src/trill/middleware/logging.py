"""Request logging middleware.

One INFO line per request in the form ``[ GET ] /path``, plus a
WARNING line ``[ 404 ] /path`` for misses.
"""

import logging

from trill.http.request import Request
from trill.http.response import Response
from trill.middleware.protocol import Next

logger = logging.getLogger("trill.server")


class RequestLogger:
    """Log method and URL of every request, and every 404."""

    __slots__ = ("_logger",)

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._logger = log or logger

    async def __call__(self, request: Request, next: Next) -> Response:
        self._logger.info("[ %s ] %s", request.method, request.url)
        response = await next(request)
        if response.status == 404:
            self._logger.warning("[ 404 ] %s", request.url)
        return response
