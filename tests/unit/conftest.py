# pylint: disable=missing-module-docstring,missing-function-docstring,missing-class-docstring

from __future__ import annotations

import json
from collections import defaultdict
from typing import Any, Callable, Iterator

import pytest

from config import AppConfig
from observability import logger
from protocol.game_client import ClientEvent, GameClientError, RawMessage
from protocol.viewer_sidecar import ViewerLaunchError, ViewerOptions


# ---------------------------------------------------------------------
# Fake game client
# ---------------------------------------------------------------------

class FakeHandle:
    """Client handle driven by the test instead of a server."""

    def __init__(self, username: str = "Agent") -> None:
        self._spawn_name = username
        self._assigned: str | None = None
        self.callbacks: dict[ClientEvent, list[Callable[..., Any]]] = defaultdict(list)
        self.quit_reasons: list[str | None] = []

    @property
    def username(self) -> str | None:
        return self._assigned

    def on(self, event: ClientEvent, callback: Callable[..., Any]) -> None:
        self.callbacks[event].append(callback)

    def quit(self, reason: str | None = None) -> None:
        self.quit_reasons.append(reason)
        self.end(reason)

    # -- test drivers --------------------------------------------------

    def fire(self, event: ClientEvent, *args: Any) -> None:
        for callback in list(self.callbacks[event]):
            callback(*args)

    def spawn(self) -> None:
        self._assigned = self._spawn_name
        self.fire(ClientEvent.CONNECTED)

    def end(self, reason: str | None = "socketClosed") -> None:
        self.fire(ClientEvent.TERMINATED, reason)

    def error(self, message: str) -> None:
        self.fire(ClientEvent.FAULTED, message)

    def message(self, raw: RawMessage) -> None:
        self.fire(ClientEvent.MESSAGE, raw)


class FakeGameClient:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[dict[str, Any]] = []
        self.handles: list[FakeHandle] = []

    def connect(self, **kwargs: Any) -> FakeHandle:
        self.calls.append(kwargs)
        if self.fail:
            raise GameClientError("ECONNREFUSED")
        handle = FakeHandle()
        self.handles.append(handle)
        return handle

    @property
    def last(self) -> FakeHandle:
        return self.handles[-1]


# ---------------------------------------------------------------------
# Fake sidecar
# ---------------------------------------------------------------------

class FakeSidecar:
    def __init__(self, *, fail_times: int = 0) -> None:
        self.fail_times = fail_times
        self.launches: list[tuple[Any, ViewerOptions]] = []

    def launch(self, handle: Any, options: ViewerOptions) -> None:
        self.launches.append((handle, options))
        if self.fail_times > 0:
            self.fail_times -= 1
            raise ViewerLaunchError("EADDRINUSE 127.0.0.1:3001")


# ---------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------

@pytest.fixture
def fake_client() -> FakeGameClient:
    return FakeGameClient()


@pytest.fixture
def fake_sidecar() -> FakeSidecar:
    return FakeSidecar()


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(
        env="test",
        log_level="INFO",
        mc_username="Agent",
        mc_host="mc.example.net",
        mc_port=25565,
        mc_version="1.20.4",
        http_port=3000,
        viewer_enabled=True,
        viewer_first_person=False,
    )


@pytest.fixture
def logged(monkeypatch: pytest.MonkeyPatch) -> Iterator[list[dict[str, Any]]]:
    """Every JSONL record emitted during the test, decoded."""
    records: list[dict[str, Any]] = []
    monkeypatch.setattr(logger, "_print", lambda line: records.append(json.loads(line)))
    logger.set_level("DEBUG")
    yield records
    logger.set_level("INFO")
