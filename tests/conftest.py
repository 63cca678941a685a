"""Shared fixtures: a small served site and an app wired to a manual change source."""

import pytest

from trill.app import App
from trill.config import AppConfig
from trill.testing import ManualChangeSource

INDEX_HTML = "<p>Hi</p>"


@pytest.fixture
def site(tmp_path):
    """A served root with pages, assets, and nested directories."""
    root = tmp_path / "site"
    root.mkdir()

    (root / "index.html").write_text(INDEX_HTML)
    (root / "about.html").write_text("<h1>About</h1>")
    (root / "style.css").write_text("body { color: red; }")
    (root / "app.js").write_text("console.log('hello');")
    (root / "image.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\x01")
    (root / "data.weirdext").write_bytes(b"\x00\x01\x02\x03")

    docs = root / "docs"
    docs.mkdir()
    (docs / "index.html").write_text("<h1>Docs</h1>")
    (docs / "guide.html").write_text("<h1>Guide</h1>")

    (root / "empty").mkdir()

    # Outside the served root
    (tmp_path / "secret.txt").write_text("top secret")

    return root


@pytest.fixture
def changes():
    return ManualChangeSource()


@pytest.fixture
def config(site):
    return AppConfig(root=site, port=3000, project_marker=None, open_browser=False)


@pytest.fixture
def app(config, changes):
    return App(config, change_source=changes)
