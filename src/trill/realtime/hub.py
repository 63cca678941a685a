"""Notification hub — the set of connected live-reload clients.

The hub is explicitly owned by the ``App`` and handed to both the
WebSocket endpoint (register/unregister) and the reload broadcaster
(broadcast). It is the only shared mutable state in the server.

Free-threading safety:
    - A Lock protects the client mapping
    - ``broadcast()`` iterates a snapshot taken under the lock, so a
      client registering mid-broadcast is kept (it just misses that
      signal) and the mapping is never iterated while it changes
    - Sends happen outside the lock, concurrently, one task per client
"""

import asyncio
import logging
import threading

from trill.errors import ClientSendFailure
from trill.realtime.client import Client

logger = logging.getLogger("trill.realtime")


class NotificationHub:
    """Registry of live-reload clients with a broadcast operation.

    Usage::

        hub = NotificationHub()
        hub.register(client)
        delivered = await hub.broadcast("file-change-event")
        hub.unregister(client.id)
    """

    __slots__ = ("_clients", "_lock", "_send_timeout")

    def __init__(self, *, send_timeout: float = 5.0) -> None:
        self._clients: dict[str, Client] = {}
        self._lock = threading.Lock()
        self._send_timeout = send_timeout

    def register(self, client: Client) -> None:
        """Add a newly connected client."""
        with self._lock:
            self._clients[client.id] = client
        logger.debug("Client %s connected (%d total)", client.id, len(self))

    def unregister(self, client_id: str) -> bool:
        """Remove a client. Idempotent: returns False if it was not registered."""
        with self._lock:
            removed = self._clients.pop(client_id, None)
        if removed is not None:
            logger.debug("Client %s disconnected", client_id)
        return removed is not None

    def clients(self) -> tuple[Client, ...]:
        """Snapshot of the registered clients."""
        with self._lock:
            return tuple(self._clients.values())

    async def broadcast(self, signal: str) -> int:
        """Send *signal* to every registered client.

        Returns the number of clients that received it. Clients that are
        closed, fail, or time out are unregistered, and those that fail or
        time out are closed. Their failure never reaches the caller or
        affects the other clients.
        """
        targets: list[Client] = []
        for client in self.clients():
            if client.closed:
                self.unregister(client.id)
            else:
                targets.append(client)
        if not targets:
            return 0

        results = await asyncio.gather(*(self._deliver(client, signal) for client in targets))
        return sum(results)

    async def _deliver(self, client: Client, signal: str) -> bool:
        try:
            await asyncio.wait_for(client.send(signal), timeout=self._send_timeout)
        except ClientSendFailure as exc:
            logger.debug("Dropping client %s: %s", client.id, exc)
        except TimeoutError:
            logger.debug("Dropping client %s: send timed out", client.id)
        else:
            return True
        self.unregister(client.id)
        await self._discard(client)
        return False

    async def _discard(self, client: Client) -> None:
        """Close a dropped client so the browser sees the channel end."""
        try:
            await asyncio.wait_for(client.close(), timeout=self._send_timeout)
        except TimeoutError:
            logger.debug("Closing client %s timed out", client.id)

    async def close(self) -> None:
        """Close every client channel and empty the hub (server shutdown)."""
        with self._lock:
            clients = tuple(self._clients.values())
            self._clients.clear()
        if clients:
            await asyncio.gather(*(client.close() for client in clients))

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)

    def __contains__(self, client_id: object) -> bool:
        with self._lock:
            return client_id in self._clients
