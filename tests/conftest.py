"""
Shared pytest fixtures for the pprof load-test suite.

Provides a live stand-in target (a Flask app served from a background
thread) for each response scenario, an address where nothing listens
for the "unreachable" scenario, and Locust environments wired to a
local runner so request statistics are collected.

Key SDET Concepts Demonstrated:
- Factory fixtures that start one throwaway server per scenario
- Server-side request counts to reconcile against client-side checks
- Environment variable overrides applied before the package is imported
- In-process Locust environments instead of spawning the CLI
"""

from __future__ import annotations

import os

# Locust monkey-patches the standard library via gevent on import; doing
# it first keeps sockets and threads created below cooperative.
import locust  # noqa: F401

os.environ["LOADTEST_ENV"] = "testing"

import socket
import threading
from collections.abc import Callable, Generator

import pytest
from locust.env import Environment
from werkzeug.serving import make_server

from pprof_load.locustfile import PprofTargetUser, apply_graceful_stop
from pprof_load.target import create_app, hit_count


class StubTarget:
    """Handle on a running stand-in target: its base URL and request count."""

    def __init__(self, app, url: str):
        self.app = app
        self.url = url

    @property
    def hits(self) -> int:
        return hit_count(self.app)


@pytest.fixture
def stub_target() -> Generator[Callable[..., StubTarget], None, None]:
    """
    Factory fixture that serves the stand-in target with a given status.

    Yields:
        Function taking an HTTP status (and optionally a per-request
        delay in seconds) and returning a :class:`StubTarget` for a
        freshly started server that answers every request with it.

    Example:
        def test_something(stub_target):
            target = stub_target(500)
            ...
            assert target.hits == 3
    """
    servers = []

    def _start(status: int = 200, delay: float = 0.0) -> StubTarget:
        app = create_app("testing", status=status, delay=delay)
        server = make_server("127.0.0.1", 0, app, threaded=True)
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        servers.append(server)
        return StubTarget(app, f"http://127.0.0.1:{server.server_port}")

    yield _start

    for server in servers:
        server.shutdown()
        server.server_close()


@pytest.fixture
def unreachable_url() -> str:
    """Return a loopback URL on a port that was free a moment ago."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"http://127.0.0.1:{port}"


@pytest.fixture
def locust_env_factory(monkeypatch) -> Generator[Callable[..., Environment], None, None]:
    """
    Factory fixture building a Locust ``Environment`` aimed at *host*.

    A local runner is created for every environment because Locust only
    starts recording request statistics once a runner exists.  The
    graceful-stop init listener is applied by hand since a bare
    ``Environment`` never fires ``events.init``.
    """
    environments = []

    def _build(host: str, **kwargs) -> Environment:
        monkeypatch.setattr(PprofTargetUser, "host", host)
        env = Environment(user_classes=[PprofTargetUser], host=host, **kwargs)
        apply_graceful_stop(env)
        env.create_local_runner()
        environments.append(env)
        return env

    yield _build

    for env in environments:
        if env.runner is not None:
            env.runner.quit()
