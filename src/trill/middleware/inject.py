"""Reload-script injection middleware.

Appends the live-reload client snippet to every HTML page the static
server returns. The page bytes are never decoded: the response body is
the original file followed by exactly one snippet.
"""

from trill.http.request import Request
from trill.http.response import Response
from trill.middleware.protocol import Next


def is_page_request(path: str) -> bool:
    """True for ``/``, directory URLs, and ``*.html`` paths."""
    return path.endswith("/") or path.endswith(".html")


class ReloadInject:
    """Middleware that appends a snippet to HTML page responses.

    Only touches successful ``text/html`` responses for page paths
    (see ``is_page_request``). Other assets, redirects and error
    bodies pass through unchanged.

    Usage::

        app.add_middleware(ReloadInject('<script>...</script>'))
    """

    __slots__ = ("_snippet",)

    def __init__(self, snippet: str | bytes) -> None:
        self._snippet = snippet.encode("utf-8") if isinstance(snippet, str) else snippet

    @property
    def snippet(self) -> bytes:
        return self._snippet

    async def __call__(self, request: Request, next: Next) -> Response:
        """Inject the snippet into HTML page responses."""
        response = await next(request)

        if response.status != 200:
            return response
        if not is_page_request(request.path):
            return response
        if "text/html" not in response.content_type:
            return response

        return response.with_body(response.body_bytes + self._snippet)
