"""ASGI HTTP handler — translates ASGI scope/messages to trill types.

Builds a Request from the scope, runs it through the middleware chain
around the static file handler, and sends the Response back through
ASGI send().
"""

from collections.abc import Awaitable, Callable
from typing import Any

from trill._internal.asgi import Receive, Scope, Send
from trill.http.request import Request
from trill.http.response import Response
from trill.middleware.protocol import Next
from trill.server.errors import error_response
from trill.server.sender import send_response


def build_pipeline(
    endpoint: Callable[[Request], Awaitable[Response]],
    middleware: tuple[Callable[..., Any], ...],
) -> Next:
    """Wrap *endpoint* in *middleware* (first entry is outermost).

    Errors raised by the endpoint are converted to responses at the
    innermost layer, so every middleware sees a Response (a 404 is a
    response the logger and injector can inspect, not an exception).
    """

    async def dispatch(req: Request) -> Response:
        try:
            return await endpoint(req)
        except Exception as exc:
            return error_response(exc, req)

    handler: Next = dispatch
    for mw in reversed(middleware):
        outer = handler

        async def make_next(req: Request, _mw: Any = mw, _next: Next = outer) -> Response:
            return await _mw(req, _next)

        handler = make_next

    return handler


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    pipeline: Next,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope)

    try:
        response = await pipeline(request)
    except Exception as exc:
        # A middleware failed after the endpoint answered
        response = error_response(exc, request)

    await send_response(response, send, head=request.method == "HEAD")
