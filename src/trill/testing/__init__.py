"""Test utilities for trill applications.

Provides an in-process ASGI test client for HTTP requests and
live-reload WebSocket sessions, plus a manual change source::

    from trill.testing import ManualChangeSource, TestClient
"""

from trill.testing.changes import ManualChangeSource
from trill.testing.client import TestClient, WebSocketSession

__all__ = [
    "ManualChangeSource",
    "TestClient",
    "WebSocketSession",
]
