"""Tests for reload-script injection."""

import pytest

from trill.app import App
from trill.config import AppConfig
from trill.http.request import Request
from trill.http.response import Response
from trill.middleware.inject import ReloadInject, is_page_request
from trill.testing import TestClient

SNIPPET = '<script data-test="reload"></script>'
NOT_FOUND_BODY = b'{"code":"NOT-FOUND","message":"Requested file not found on the directory."}'


class TestIsPageRequest:
    @pytest.mark.parametrize("path", ["/", "/docs/", "/about.html", "/a/b/c.html"])
    def test_pages(self, path: str) -> None:
        assert is_page_request(path)

    @pytest.mark.parametrize("path", ["/style.css", "/app.js", "/docs", "/page.htm", "/x.html.bak"])
    def test_not_pages(self, path: str) -> None:
        assert not is_page_request(path)


class TestReloadInjectUnit:
    async def test_appends_to_html_page(self) -> None:
        mw = ReloadInject(SNIPPET)

        async def next_handler(request: Request) -> Response:
            return Response(b"<h1>Hi</h1>")

        response = await mw(Request(method="GET", path="/"), next_handler)
        assert response.body_bytes == b"<h1>Hi</h1>" + SNIPPET.encode()

    async def test_accepts_bytes_snippet(self) -> None:
        mw = ReloadInject(SNIPPET.encode())
        assert mw.snippet == SNIPPET.encode()

    async def test_skips_non_200(self) -> None:
        mw = ReloadInject(SNIPPET)

        async def next_handler(request: Request) -> Response:
            return Response(b"<h1>Gone</h1>", status=410)

        response = await mw(Request(method="GET", path="/old.html"), next_handler)
        assert response.body_bytes == b"<h1>Gone</h1>"

    async def test_skips_non_html_content_type(self) -> None:
        mw = ReloadInject(SNIPPET)

        async def next_handler(request: Request) -> Response:
            return Response(b"{}", content_type="application/json")

        response = await mw(Request(method="GET", path="/data.html"), next_handler)
        assert response.body_bytes == b"{}"

    async def test_skips_non_page_path(self) -> None:
        mw = ReloadInject(SNIPPET)

        async def next_handler(request: Request) -> Response:
            return Response(b"<svg></svg>")

        response = await mw(Request(method="GET", path="/icon.svg"), next_handler)
        assert response.body_bytes == b"<svg></svg>"


class TestInjectionThroughApp:
    async def test_root_gets_exactly_one_snippet(self, app) -> None:
        async with TestClient(app) as client:
            response = await client.get("/")
            snippet = app.reload_snippet.encode()
            assert response.status == 200
            assert response.body_bytes == b"<p>Hi</p>" + snippet
            assert response.body_bytes.count(b'data-trill="live-reload"') == 1

    async def test_html_file_injected(self, app) -> None:
        async with TestClient(app) as client:
            response = await client.get("/about.html")
            assert response.body_bytes == b"<h1>About</h1>" + app.reload_snippet.encode()

    async def test_directory_index_injected(self, app) -> None:
        async with TestClient(app) as client:
            response = await client.get("/docs/")
            assert response.body_bytes.endswith(app.reload_snippet.encode())

    async def test_css_not_injected(self, app) -> None:
        async with TestClient(app) as client:
            response = await client.get("/style.css")
            assert response.body_bytes == b"body { color: red; }"

    async def test_missing_page_gets_plain_404(self, app) -> None:
        async with TestClient(app) as client:
            response = await client.get("/missing.html")
            assert response.status == 404
            assert response.body_bytes == NOT_FOUND_BODY

    async def test_redirect_not_injected(self, app) -> None:
        async with TestClient(app) as client:
            response = await client.get("/docs")
            assert response.status == 301
            assert response.body_bytes == b""

    async def test_non_utf8_page_bytes_preserved(self, app, site) -> None:
        raw = b"<p>caf\xe9 \xff</p>"
        (site / "latin.html").write_bytes(raw)
        async with TestClient(app) as client:
            response = await client.get("/latin.html")
            assert response.body_bytes == raw + app.reload_snippet.encode()

    async def test_head_length_includes_snippet(self, app) -> None:
        async with TestClient(app) as client:
            response = await client.head("/")
            expected = len(b"<p>Hi</p>" + app.reload_snippet.encode())
            assert response.body_bytes == b""
            assert response.header("content-length") == str(expected)

    async def test_live_reload_off_serves_plain_html(self, site) -> None:
        app = App(AppConfig(root=site, live_reload=False))
        assert app.reload_snippet == ""
        async with TestClient(app) as client:
            response = await client.get("/")
            assert response.body_bytes == b"<p>Hi</p>"

    async def test_snippet_references_configured_port(self, site, changes) -> None:
        app = App(AppConfig(root=site, port=4567), change_source=changes)
        async with TestClient(app) as client:
            response = await client.get("/")
            assert b":4567/" in response.body_bytes
