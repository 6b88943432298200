"""Shared test fixtures for netcache.

Provides an isolated config environment, a fixed clock, a scriptable fake
network served through :class:`httpx.MockTransport`, output state
management, and a CLI runner. These fixtures are automatically discovered
by pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator, Callable
from pathlib import Path
from typing import Any, Optional, Union

import httpx
import pytest

from netcache.output import OutputFormat, OutputManager, reset_output, set_output
from netcache.store import LocalStore


FIXED_NOW = 1_760_870_400
"""Epoch second returned by the ``clock`` fixture."""


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Fake network
# ---------------------------------------------------------------------------


Behaviour = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


class FakeNetwork:
    """Scriptable stand-in for the internet.

    Routes are keyed on host and path, so ``https://www.google.com`` and
    ``https://www.google.com/`` are the same route. Requests to unrouted
    URLs fail with :class:`httpx.ConnectError`, i.e. by default the
    machine is offline.

    Every request is recorded in :attr:`requests`.
    """

    def __init__(self) -> None:
        self._routes: dict[tuple[str, str], Behaviour] = {}
        self.requests: list[httpx.Request] = []

    @staticmethod
    def _key(url: Union[str, httpx.URL]) -> tuple[str, str]:
        parsed = httpx.URL(url)
        return parsed.host, parsed.path or "/"

    def respond(
        self,
        url: str,
        status: int = 200,
        json: Any = None,
        content: Optional[bytes] = None,
    ) -> None:
        """Answer GETs to *url* with a fixed response."""
        if content is not None:
            response = httpx.Response(status, content=content)
        else:
            response = httpx.Response(status, json=json)
        self._routes[self._key(url)] = response

    def fail(self, url: str, exc: Optional[Exception] = None) -> None:
        """Make requests to *url* raise *exc* (a connection error by default)."""
        self._routes[self._key(url)] = exc or httpx.ConnectError("connection refused")

    def handle(self, url: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        """Delegate requests to *url* to a custom handler."""
        self._routes[self._key(url)] = handler

    def go_online(self, *urls: str) -> None:
        """Make the default internet probe endpoints (plus *urls*) answer 200."""
        from netcache.models import DEFAULT_PROBE_ENDPOINTS

        for url in [*DEFAULT_PROBE_ENDPOINTS, *urls]:
            self.respond(url, json={})

    def calls_to(self, url: str) -> int:
        """Number of requests recorded for *url*'s host and path."""
        key = self._key(url)
        return sum(1 for r in self.requests if self._key(r.url) == key)

    def _dispatch(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        behaviour = self._routes.get(self._key(request.url))
        if behaviour is None:
            raise httpx.ConnectError("network unreachable", request=request)
        if isinstance(behaviour, Exception):
            raise behaviour
        if isinstance(behaviour, httpx.Response):
            return httpx.Response(
                behaviour.status_code,
                headers=behaviour.headers,
                content=behaviour.content,
            )
        return behaviour(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._dispatch)


@pytest.fixture
def network() -> FakeNetwork:
    """A fresh, fully offline :class:`FakeNetwork`."""
    return FakeNetwork()


@contextlib.asynccontextmanager
async def trickle_server(body: bytes, delay: float) -> AsyncIterator[str]:
    """Serve *body* on a local port one byte every *delay* seconds.

    Every byte arrives well inside a per-read timeout, so only a bound on the
    whole request can cut the transfer short. Yields the server URL.
    """
    stop = asyncio.Event()

    async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        try:
            await reader.readuntil(b"\r\n\r\n")
            writer.write(
                b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n"
                b"Content-Length: %d\r\nConnection: close\r\n\r\n" % len(body)
            )
            await writer.drain()
            for i in range(len(body)):
                if stop.is_set():
                    break
                await asyncio.sleep(delay)
                writer.write(body[i : i + 1])
                await writer.drain()
        except (ConnectionError, asyncio.IncompleteReadError):
            pass
        finally:
            writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    try:
        yield f"http://127.0.0.1:{port}/"
    finally:
        stop.set()
        server.close()
        await server.wait_closed()


@pytest.fixture
def no_proxy_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep proxy settings from routing requests to the local test server."""
    for var in ["HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"]:
        monkeypatch.delenv(var, raising=False)


# ---------------------------------------------------------------------------
# Clock and store
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> Callable[[], int]:
    """A clock frozen at :data:`FIXED_NOW`."""
    return lambda: FIXED_NOW


@pytest.fixture
def store_dir(tmp_path: Path) -> Path:
    """Directory for cache entries (not created up front)."""
    return tmp_path / "entries"


@pytest.fixture
def store(store_dir: Path, clock: Callable[[], int]) -> LocalStore:
    """A :class:`LocalStore` over ``store_dir`` with the fixed clock."""
    return LocalStore(store_dir, clock=clock)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path
    so that tests never touch real user config, clears the NETCACHE_*
    environment variables, and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("netcache.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ["NETCACHE_TARGET_URL", "NETCACHE_CACHE_DIR"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet PLAIN-format OutputManager for the duration of a test."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def verbose_output() -> OutputManager:
    """Install a verbose, colourless OutputManager so debug lines reach stderr."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
