"""Live-reload endpoint — ASGI WebSocket handling.

The endpoint shares the HTTP port: the ASGI server performs the
upgrade and hands us a ``websocket`` scope. The protocol is
server-push only, so inbound frames are read and dropped.
"""

from trill._internal.asgi import Receive, Scope, Send
from trill.realtime.client import WebSocketClient
from trill.realtime.hub import NotificationHub

# Policy violation: refuse connections to anything but the reload path
_CLOSE_REFUSED = 1008


async def handle_websocket(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    hub: NotificationHub | None,
    reload_path: str = "/",
) -> None:
    """Serve one live-reload connection until the browser goes away.

    With ``hub=None`` (live reload disabled) every connection is refused.
    """
    message = await receive()
    if message["type"] != "websocket.connect":
        return

    if hub is None or scope.get("path", "/") != reload_path:
        await send({"type": "websocket.close", "code": _CLOSE_REFUSED})
        return

    await send({"type": "websocket.accept"})
    client = WebSocketClient(send)
    hub.register(client)
    try:
        while True:
            message = await receive()
            if message["type"] == "websocket.disconnect":
                break
            # websocket.receive: server-push only, ignore
    finally:
        client.mark_closed()
        hub.unregister(client.id)
