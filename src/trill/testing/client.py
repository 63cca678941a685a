"""Async test client for trill applications.

Uses the same Response type as production. Requests and WebSocket
sessions go through the ASGI interface directly — no sockets involved.
"""

import asyncio
import contextlib
from typing import Any

from trill.app import App
from trill.http.response import Response


class WebSocketSession:
    """One in-process WebSocket connection to the app.

    Usage::

        async with client.websocket("/") as ws:
            assert ws.accepted
            assert await ws.receive_text() == "file-change-event"
    """

    __slots__ = (
        "_app",
        "_fail_sends",
        "_incoming",
        "_outgoing",
        "_task",
        "accepted",
        "close_code",
        "path",
    )

    def __init__(self, app: App, path: str) -> None:
        self._app = app
        self.path = path
        self._incoming: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self._outgoing: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self._task: asyncio.Task[None] | None = None
        self._fail_sends = False
        self.accepted = False
        self.close_code: int | None = None

    async def __aenter__(self) -> WebSocketSession:
        scope = _scope("websocket", self.path)
        scope["subprotocols"] = []

        async def receive() -> dict[str, Any]:
            return await self._incoming.get()

        async def send(message: dict[str, Any]) -> None:
            if self._fail_sends and message["type"] == "websocket.send":
                raise OSError("connection reset by peer")
            await self._outgoing.put(message)

        self._task = asyncio.create_task(self._app(scope, receive, send))
        await self._incoming.put({"type": "websocket.connect"})

        first = await asyncio.wait_for(self._outgoing.get(), timeout=5.0)
        if first["type"] == "websocket.accept":
            self.accepted = True
        elif first["type"] == "websocket.close":
            self.close_code = first.get("code", 1000)
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    async def receive(self, timeout: float = 2.0) -> dict[str, Any]:
        """Next raw ASGI message the app sent. Raises TimeoutError if none."""
        message = await asyncio.wait_for(self._outgoing.get(), timeout=timeout)
        if message["type"] == "websocket.close":
            self.close_code = message.get("code", 1000)
        return message

    async def receive_text(self, timeout: float = 2.0) -> str:
        """Next text frame. Raises AssertionError if the app closed instead."""
        message = await self.receive(timeout)
        assert message["type"] == "websocket.send", f"expected a text frame, got {message!r}"
        return message["text"]

    def pending(self) -> int:
        """Number of messages sent by the app and not yet received."""
        return self._outgoing.qsize()

    async def send_text(self, text: str) -> None:
        """Send a text frame from the browser side."""
        await self._incoming.put({"type": "websocket.receive", "text": text})

    def break_connection(self) -> None:
        """Make every further server send fail, like a dead socket."""
        self._fail_sends = True

    async def close(self, code: int = 1000) -> None:
        """Disconnect from the browser side and wait for the handler to end."""
        if self._task is None:
            return
        task, self._task = self._task, None
        if not task.done():
            await self._incoming.put({"type": "websocket.disconnect", "code": code})
        try:
            await asyncio.wait_for(task, timeout=5.0)
        except TimeoutError:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task


class TestClient:
    __test__ = False  # Tell pytest this is not a test class
    """Async test client for trill applications.

    Returns the same ``Response`` type used in production. Sends requests
    through the ASGI interface directly — no HTTP involved.

    Entering the client starts live reload on the test's event loop
    (like lifespan startup); leaving it shuts it down.

    Usage::

        async with TestClient(app) as client:
            response = await client.get("/")
            assert response.status == 200
    """

    __slots__ = ("app",)

    def __init__(self, app: App) -> None:
        self.app = app

    async def __aenter__(self) -> TestClient:
        self.app._ensure_frozen()
        self.app.ensure_live_reload()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.app.shutdown()

    async def get(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
    ) -> Response:
        """Send a GET request."""
        return await self.request("GET", path, headers=headers)

    async def head(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
    ) -> Response:
        """Send a HEAD request."""
        return await self.request("HEAD", path, headers=headers)

    async def post(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> Response:
        """Send a POST request."""
        return await self.request("POST", path, headers=headers, body=body)

    def websocket(self, path: str = "/") -> WebSocketSession:
        """Open a WebSocket session (use as ``async with``)."""
        return WebSocketSession(self.app, path)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> Response:
        """Send an arbitrary request through the ASGI app."""
        path, _, query = path.partition("?")
        scope = _scope("http", path, query=query, headers=headers)
        scope["method"] = method.upper()

        pending = [{"type": "http.request", "body": body or b"", "more_body": False}]
        sent: list[dict[str, Any]] = []

        async def receive() -> dict[str, Any]:
            return pending.pop() if pending else {"type": "http.disconnect"}

        async def send(message: dict[str, Any]) -> None:
            sent.append(message)

        await self.app(scope, receive, send)
        return _collect_response(sent)


def _scope(
    scope_type: str,
    path: str,
    *,
    query: str = "",
    headers: dict[str, str] | None = None,
) -> dict[str, Any]:
    """A minimal ASGI scope as a server on ``testserver:80`` would build it."""
    raw_headers = [(b"host", b"testserver")]
    for name, value in (headers or {}).items():
        raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))
    return {
        "type": scope_type,
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "scheme": "ws" if scope_type == "websocket" else "http",
        "path": path,
        "raw_path": path.encode("latin-1"),
        "query_string": query.encode("latin-1"),
        "root_path": "",
        "headers": raw_headers,
        "server": ("testserver", 80),
        "client": ("127.0.0.1", 0),
    }


def _collect_response(messages: list[dict[str, Any]]) -> Response:
    """Rebuild a Response from the ``http.response.*`` messages the app sent."""
    status = 200
    content_type = "text/html; charset=utf-8"
    headers: list[tuple[str, str]] = []
    body = bytearray()
    for message in messages:
        if message["type"] == "http.response.start":
            status = message["status"]
            for raw_name, raw_value in message.get("headers", []):
                name, value = raw_name.decode("latin-1"), raw_value.decode("latin-1")
                if name == "content-type":
                    content_type = value
                else:
                    headers.append((name, value))
        elif message["type"] == "http.response.body":
            body.extend(message.get("body", b""))
    return Response(
        body=bytes(body), status=status, content_type=content_type, headers=tuple(headers)
    )
