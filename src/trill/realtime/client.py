"""Live-reload clients.

A client is one open push channel to a browser tab. The hub only needs
the ``Client`` shape; ``WebSocketClient`` is the production
implementation over an ASGI WebSocket connection.
"""

import asyncio
import logging
import uuid
from typing import Protocol

from trill._internal.asgi import Send
from trill.errors import ClientSendFailure

logger = logging.getLogger("trill.realtime")


def new_client_id() -> str:
    return uuid.uuid4().hex[:12]


class Client(Protocol):
    """What the NotificationHub needs from a connected client."""

    @property
    def id(self) -> str: ...

    @property
    def closed(self) -> bool: ...

    async def send(self, signal: str) -> None:
        """Deliver *signal*. Raises ``ClientSendFailure`` on failure."""
        ...

    async def close(self) -> None: ...


class WebSocketClient:
    """A browser connected to the live-reload endpoint.

    Sends are serialised with a per-client lock so signals arrive in
    the order they were broadcast. Any failure marks the client closed;
    a close frame can still be attempted afterwards with ``close()``.
    """

    __slots__ = ("_close_sent", "_closed", "_id", "_lock", "_send")

    def __init__(self, send: Send, client_id: str | None = None) -> None:
        self._send = send
        self._id = client_id or new_client_id()
        self._closed = False
        self._close_sent = False
        self._lock = asyncio.Lock()

    @property
    def id(self) -> str:
        return self._id

    @property
    def closed(self) -> bool:
        return self._closed

    def mark_closed(self) -> None:
        """Record that the remote end went away."""
        self._closed = True
        self._close_sent = True

    async def send(self, signal: str) -> None:
        if self._closed:
            raise ClientSendFailure(self._id, "channel closed")
        async with self._lock:
            try:
                await self._send({"type": "websocket.send", "text": signal})
            except Exception as exc:
                # ASGI servers raise different types for a dead socket
                self._closed = True
                raise ClientSendFailure(self._id, str(exc) or type(exc).__name__) from exc

    async def close(self, code: int = 1001) -> None:
        """Close the channel from the server side (1001 = going away)."""
        if self._close_sent:
            return
        self._closed = True
        self._close_sent = True
        async with self._lock:
            try:
                await self._send({"type": "websocket.close", "code": code})
            except Exception as exc:
                logger.debug("Closing client %s failed: %s", self._id, exc)

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"WebSocketClient({self._id!r}, {state})"
