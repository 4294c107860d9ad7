"""Shared test fixtures for the cmdgate test suite.

Provides route tables, request contexts and HTTP helpers used across
the unit tests. Process tests run real POSIX tools (echo, env, diff,
cat, pwd, sh), so the suite expects a Unix-like host.
"""

from __future__ import annotations

import threading

import httpx
import pytest

from cmdgate.config.routes import RouteTable
from cmdgate.domain.models import CommandSpec, EffectiveCommand, ParamField, RequestContext


# ---------------------------------------------------------------------------
# Route Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def echo_spec() -> CommandSpec:
    """An echo route that allows nothing."""
    return CommandSpec(command="echo", args=("hello", "world"))


@pytest.fixture
def open_spec() -> CommandSpec:
    """An echo route that allows every request field."""
    return CommandSpec(command="echo", args=("hello",), allow=frozenset(ParamField))


@pytest.fixture
def route_table() -> RouteTable:
    """A route table covering the common gateway scenarios."""
    return RouteTable(
        {
            "/hello": CommandSpec(command="echo", args=("hello", "world")),
            "/hello/2": CommandSpec(command="echo", args=("hello world",)),
            "/echo": CommandSpec(command="echo", args=("hello",), allow=frozenset({ParamField.ARGS})),
            "/env": CommandSpec(
                command="env", envs=("FOO=BAR",), allow=frozenset({ParamField.ENVS})
            ),
            "/cat": CommandSpec(command="cat", allow=frozenset({ParamField.STDIN})),
            "/pwd": CommandSpec(command="pwd", dir="/", allow=frozenset({ParamField.DIR})),
            "/async": CommandSpec(
                command="echo",
                args=("called", "back"),
                allow=frozenset({ParamField.ARGS, ParamField.CALLBACK}),
            ),
            "/fail": CommandSpec(command="sh", args=("-c", "echo oops; exit 3")),
            "/missing": CommandSpec(command="cmdgate-no-such-binary"),
        }
    )


# ---------------------------------------------------------------------------
# Request Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def request_context() -> RequestContext:
    return RequestContext(request_id="req-1", method="POST", path="/hello")


@pytest.fixture
def echo_command() -> EffectiveCommand:
    return EffectiveCommand(command="echo", args=("hello", "world"))


# ---------------------------------------------------------------------------
# Callback Receiver
# ---------------------------------------------------------------------------


class CallbackRecorder:
    """Collects requests sent through an httpx.MockTransport.

    ``wait()`` blocks until at least ``count`` requests arrived, so tests
    running the app in a TestClient thread can synchronize on delivery.
    """

    def __init__(self, status_code: int = 200) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = status_code
        self._cond = threading.Condition()

    def handler(self, request: httpx.Request) -> httpx.Response:
        request.read()
        with self._cond:
            self.requests.append(request)
            self._cond.notify_all()
        return httpx.Response(self.status_code, json={"ok": True})

    def wait(self, count: int = 1, timeout: float = 10.0) -> bool:
        with self._cond:
            return self._cond.wait_for(lambda: len(self.requests) >= count, timeout=timeout)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def make_callback_recorder() -> type[CallbackRecorder]:
    return CallbackRecorder


@pytest.fixture
def callback_recorder() -> CallbackRecorder:
    return CallbackRecorder()
