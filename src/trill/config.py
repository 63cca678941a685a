"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass, field
from pathlib import Path


def _cwd() -> Path:
    return Path.cwd()


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Dev server configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(port=8080, root="site", open_browser=False)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 3000

    # Served root, resolved once when the App is created
    root: str | Path = field(default_factory=_cwd)
    index: str = "index.html"
    cache_control: str = "no-cache"

    # Live reload
    live_reload: bool = True
    reload_path: str = "/"  # WebSocket endpoint, shares the HTTP port
    reload_signal: str = "file-change-event"
    reload_reconnect_ms: int | None = None  # None = never reconnect a dropped channel
    send_timeout: float = 5.0  # Seconds before a slow client is dropped

    # File watching (watchfiles)
    watch_debounce_ms: int = 50
    watch_step_ms: int = 50

    # CLI glue
    project_marker: str | None = "gc.config.json"
    open_browser: bool = True
    log_level: str = "info"
