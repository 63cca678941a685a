"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    ReloadInject -- Append the live-reload client to HTML pages
    RequestLogger -- Log method/path per request and 404 misses

StaticFiles is the innermost handler the middleware chain wraps.
"""

from trill.middleware.inject import ReloadInject
from trill.middleware.logging import RequestLogger
from trill.middleware.protocol import Middleware, Next
from trill.middleware.static import StaticFiles

__all__ = [
    "Middleware",
    "Next",
    "ReloadInject",
    "RequestLogger",
    "StaticFiles",
]
