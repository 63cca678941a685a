"""Static file serving.

Serves every file under the served root by request path. Directories
(including ``/``) resolve to their index file. This is the innermost
handler of the pipeline: nothing falls through past it, a miss raises
``NotFound``.
"""

import mimetypes
from pathlib import Path

import anyio.to_thread

from trill.errors import AssetReadError, MethodNotAllowed, NotFound
from trill.http.request import Request
from trill.http.response import Response

_ALLOWED_METHODS = frozenset({"GET", "HEAD"})


class StaticFiles:
    """Serve files from a directory tree.

    Security: resolves symlinks and ``..`` segments and verifies the
    final path is within the configured directory. Anything outside is
    reported exactly like a missing file.

    Usage::

        static = StaticFiles(directory=".", cache_control="no-cache")
        response = await static(request)
    """

    __slots__ = ("_cache_control", "_directory", "_index")

    def __init__(
        self,
        directory: str | Path,
        *,
        index: str = "index.html",
        cache_control: str = "no-cache",
    ) -> None:
        self._directory = Path(directory).resolve()
        self._index = index
        self._cache_control = cache_control

    @property
    def directory(self) -> Path:
        """The resolved served root."""
        return self._directory

    async def __call__(self, request: Request) -> Response:
        """Serve the file for *request* or raise an HTTPError.

        Path resolution, the stat calls and the read all run in a worker
        thread, so a slow filesystem never blocks the event loop.
        """
        if request.method not in _ALLOWED_METHODS:
            raise MethodNotAllowed(_ALLOWED_METHODS)
        return await anyio.to_thread.run_sync(self._lookup, request.path)

    def resolve(self, path: str) -> Path | None:
        """Map a request path to a filesystem path inside the served root.

        Returns ``None`` when the path escapes the root or cannot be
        represented on this filesystem (e.g. embedded NUL bytes).
        """
        relative = path.lstrip("/")
        if not relative:
            return self._directory
        try:
            file_path = (self._directory / relative).resolve()
        except (OSError, ValueError):
            return None
        if not file_path.is_relative_to(self._directory):
            return None
        return file_path

    # ------------------------------------------------------------------
    # Helpers (blocking, run off the event loop)
    # ------------------------------------------------------------------

    def _lookup(self, path: str) -> Response:
        file_path = self.resolve(path)
        if file_path is None:
            raise NotFound()

        # Directory: serve its index, redirecting to the trailing-slash
        # URL first so relative links inside the page resolve.
        if file_path.is_dir():
            index_path = file_path / self._index
            if not index_path.is_file():
                raise NotFound()
            if not path.endswith("/"):
                return Response(body=b"", status=301).with_header("Location", path + "/")
            file_path = index_path

        if not file_path.is_file():
            raise NotFound()

        return self._serve_file(file_path)

    def _serve_file(self, file_path: Path) -> Response:
        """Read a file and build a response."""
        content_type, _ = mimetypes.guess_type(str(file_path))
        if content_type is None:
            content_type = "application/octet-stream"
        elif content_type.startswith("text/") and "charset" not in content_type:
            content_type = f"{content_type}; charset=utf-8"

        try:
            body = file_path.read_bytes()
        except FileNotFoundError as exc:
            # Deleted between the stat and the read
            raise NotFound() from exc
        except OSError as exc:
            raise AssetReadError(str(file_path), exc.strerror or str(exc)) from exc

        return Response(body=body, content_type=content_type).with_header(
            "Cache-Control", self._cache_control
        )
