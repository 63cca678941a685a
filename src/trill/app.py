"""Trill application class.

Mutable during setup (extra middleware). Frozen at runtime when
``app.run()`` or ``__call__()`` is first invoked.
"""

import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from trill._internal.asgi import Receive, Scope, Send
from trill.config import AppConfig
from trill.middleware.inject import ReloadInject
from trill.middleware.logging import RequestLogger
from trill.middleware.protocol import Middleware, Next
from trill.middleware.static import StaticFiles
from trill.realtime.broadcast import ReloadBroadcaster
from trill.realtime.hub import NotificationHub
from trill.realtime.watcher import ChangeSource, FileWatcher
from trill.server.handler import build_pipeline, handle_request
from trill.server.reload_client import render_reload_client
from trill.server.websocket import handle_websocket

logger = logging.getLogger("trill.server")


class App:
    """The live-reloading static dev server as an ASGI application.

    Owns the served root, the notification hub, the change source and
    the request pipeline ``RequestLogger → ReloadInject → StaticFiles``.

    Usage::

        app = App(AppConfig(root="site", port=3000))
        app.run()

    Thread safety:
        The freeze transition uses a Lock + double-check so exactly one
        thread compiles the pipeline, even if a server calls
        ``__call__()`` concurrently on first request.
    """

    __slots__ = (
        "_broadcaster",
        "_change_source",
        "_freeze_lock",
        "_frozen",
        "_hub",
        "_live_lock",
        "_middleware_list",
        "_pipeline",
        "_reload_snippet",
        "_root",
        "_static",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        change_source: ChangeSource | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._root: Path = Path(self.config.root).resolve()
        self._middleware_list: list[Middleware] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()
        self._live_lock: threading.Lock = threading.Lock()
        self._static = StaticFiles(
            self._root,
            index=self.config.index,
            cache_control=self.config.cache_control,
        )

        # Live reload: hub + change source + broadcaster. None when disabled.
        self._hub: NotificationHub | None = None
        self._change_source: ChangeSource | None = None
        self._broadcaster: ReloadBroadcaster | None = None
        self._reload_snippet: str = ""
        if self.config.live_reload:
            self._hub = NotificationHub(send_timeout=self.config.send_timeout)
            self._change_source = change_source or FileWatcher(
                self._root,
                debounce_ms=self.config.watch_debounce_ms,
                step_ms=self.config.watch_step_ms,
            )
            self._reload_snippet = render_reload_client(
                port=self.config.port,
                path=self.config.reload_path,
                signal=self.config.reload_signal,
                reconnect_ms=self.config.reload_reconnect_ms,
            )

        # Compiled state, set during _freeze()
        self._pipeline: Next | None = None

    # -- Accessors --

    @property
    def root(self) -> Path:
        """The served root. Fixed for the lifetime of the app."""
        return self._root

    @property
    def hub(self) -> NotificationHub | None:
        """The live-reload client registry (``None`` when live reload is off)."""
        return self._hub

    @property
    def reload_snippet(self) -> str:
        """The ``<script>`` block appended to HTML pages."""
        return self._reload_snippet

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware outside the built-in ones."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Live reload lifecycle --

    def ensure_live_reload(self) -> None:
        """Start the broadcaster on the running loop, once.

        Called on lifespan startup and, for servers without lifespan
        support, on the first WebSocket connection.
        """
        if self._hub is None or self._change_source is None:
            return
        with self._live_lock:
            if self._broadcaster is not None:
                # Started once; a watcher that failed stays off
                return
            self._broadcaster = ReloadBroadcaster(
                self._change_source, self._hub, signal=self.config.reload_signal
            )
            self._broadcaster.start()
        logger.debug("Live reload enabled for %s", self._root)

    async def shutdown(self) -> None:
        """Stop watching and close every live-reload channel."""
        broadcaster, self._broadcaster = self._broadcaster, None
        if broadcaster is not None:
            await broadcaster.stop()
        elif self._change_source is not None:
            self._change_source.stop()
        if self._hub is not None:
            await self._hub.close()

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Freeze the app and serve it until interrupted.

        Raises:
            ListenFailure: If the port is in use or cannot be bound.
        """
        from trill.server.dev import run_dev_server

        self._ensure_frozen()
        run_dev_server(self, host or self.config.host, port or self.config.port)

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()

        if scope["type"] == "websocket":
            self.ensure_live_reload()
            await handle_websocket(
                scope,
                receive,
                send,
                hub=self._hub,
                reload_path=self.config.reload_path,
            )
            return

        assert self._pipeline is not None
        await handle_request(scope, receive, send, pipeline=self._pipeline)

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol.

        Startup freezes the app and starts the broadcaster; shutdown
        stops the watcher and closes every client channel.
        """
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self.ensure_live_reload()
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    await send(
                        {
                            "type": "lifespan.startup.failed",
                            "message": str(exc),
                        }
                    )
                    return

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the request pipeline.

        MUST only be called while holding _freeze_lock.
        """
        middleware: list[Callable[..., Any]] = [*self._middleware_list, RequestLogger()]
        if self._reload_snippet:
            middleware.append(ReloadInject(self._reload_snippet))
        self._pipeline = build_pipeline(self._static, tuple(middleware))
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Add middleware before calling app.run()."
            )
            raise RuntimeError(msg)

