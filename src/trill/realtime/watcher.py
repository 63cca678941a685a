"""Filesystem watcher — one ChangeEvent per batch of OS events.

Wraps ``watchfiles.awatch``: a recursive watch on the served root that
coalesces bursts (an editor save often produces several OS events)
within the debounce window. Consumers see an async stream of
``ChangeEvent`` and never any paths.
"""

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import anyio
from watchfiles import awatch

from trill.errors import WatcherUnavailable

logger = logging.getLogger("trill.realtime")


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """Something under the served root changed.

    ``count`` is the number of coalesced OS events, for logging only.
    """

    count: int = 1


class ChangeSource(Protocol):
    """Anything that produces ChangeEvents and can be told to stop."""

    def events(self) -> AsyncIterator[ChangeEvent]: ...

    def stop(self) -> None: ...


class FileWatcher:
    """Recursive watcher on a directory tree.

    Usage::

        watcher = FileWatcher(root)
        async for event in watcher.events():
            await hub.broadcast(signal)

    ``events()`` raises ``WatcherUnavailable`` when the watch cannot be
    established. ``stop()`` ends the stream from any task.
    """

    __slots__ = ("_debounce_ms", "_root", "_step_ms", "_stop_event", "_stopped")

    def __init__(self, root: str | Path, *, debounce_ms: int = 50, step_ms: int = 50) -> None:
        self._root = Path(root)
        self._debounce_ms = debounce_ms
        self._step_ms = step_ms
        self._stop_event: anyio.Event | None = None
        self._stopped = False

    @property
    def root(self) -> Path:
        return self._root

    async def events(self) -> AsyncIterator[ChangeEvent]:
        if not self._root.is_dir():
            raise WatcherUnavailable(f"{self._root} is not a directory")
        if self._stopped:
            return

        self._stop_event = anyio.Event()
        logger.debug("Watching %s", self._root)
        try:
            async for changes in awatch(
                self._root,
                watch_filter=None,
                debounce=self._debounce_ms,
                step=self._step_ms,
                stop_event=self._stop_event,
                recursive=True,
            ):
                if self._stopped:
                    break
                yield ChangeEvent(count=len(changes))
        except (OSError, RuntimeError) as exc:
            # watchfiles surfaces notify backend failures as these
            raise WatcherUnavailable(f"cannot watch {self._root}: {exc}") from exc

    def stop(self) -> None:
        self._stopped = True
        if self._stop_event is not None:
            self._stop_event.set()
