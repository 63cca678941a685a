"""Reload broadcaster — the loop between the watcher and the hub.

Consumes ChangeEvents one at a time and broadcasts the reload signal
for each. Awaiting every broadcast before taking the next event keeps
signals in change order for each client.
"""

import asyncio
import contextlib
import logging

from trill.errors import WatcherUnavailable
from trill.realtime.hub import NotificationHub
from trill.realtime.watcher import ChangeSource

logger = logging.getLogger("trill.realtime")


class ReloadBroadcaster:
    """Run ``hub.broadcast(signal)`` for every event from *source*."""

    __slots__ = ("_hub", "_signal", "_source", "_task")

    def __init__(self, source: ChangeSource, hub: NotificationHub, *, signal: str) -> None:
        self._source = source
        self._hub = hub
        self._signal = signal
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self) -> None:
        """Broadcast until the source ends.

        A source that cannot watch disables live reload: the failure is
        logged once and the loop ends. Any other error also ends the loop
        with a logged traceback. Neither is retried.
        """
        try:
            async for event in self._source.events():
                delivered = await self._hub.broadcast(self._signal)
                logger.info(
                    "Reloading clients... (%d notified, %d change(s))", delivered, event.count
                )
        except WatcherUnavailable as exc:
            logger.warning("Live reload disabled: %s", exc)
        except Exception:
            logger.exception("Live reload stopped after an unexpected error")

    def start(self) -> asyncio.Task[None]:
        """Start the loop as a background task. Idempotent while running."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run(), name="trill-reload-broadcaster")
        return self._task

    async def stop(self) -> None:
        """Stop the source and wait for the loop to finish."""
        self._source.stop()
        task, self._task = self._task, None
        if task is None:
            return
        if not task.done():
            task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
