"""
JS bridge binding tests that need no Node process.

- Callbacks fired from a foreign thread land on the asyncio loop
- Auto-eat defaults are applied on spawn, and failures there are not fatal
- The viewer sidecar rejects handles without a bot
"""
# pylint: disable=missing-function-docstring,missing-class-docstring

import asyncio
import threading
from types import SimpleNamespace
from typing import Any

import pytest

from protocol.game_client import ClientEvent
from protocol.mineflayer_client import MineflayerHandle
from protocol.prismarine_viewer import PrismarineViewerSidecar
from protocol.viewer_sidecar import ViewerLaunchError, ViewerOptions


class FakeBot:
    def __init__(self) -> None:
        self.username = "Agent"
        self.autoEat = SimpleNamespace(options=None)  # pylint: disable=invalid-name
        self.quit_reasons: list[str] = []

    def quit(self, reason: str) -> None:
        self.quit_reasons.append(reason)


def test_bridge_callbacks_run_on_loop_thread():
    async def scenario() -> None:
        loop = asyncio.get_running_loop()
        handle = MineflayerHandle(FakeBot(), loop)
        loop_thread = threading.get_ident()
        seen: list[tuple[str | None, int]] = []
        done = asyncio.Event()

        def on_end(reason: str | None) -> None:
            seen.append((reason, threading.get_ident()))
            done.set()

        handle.on(ClientEvent.TERMINATED, on_end)

        bridge = threading.Thread(target=handle.dispatch, args=(ClientEvent.TERMINATED, "socketClosed"))
        bridge.start()
        bridge.join()
        await asyncio.wait_for(done.wait(), timeout=1.0)

        assert seen == [("socketClosed", loop_thread)]

    asyncio.run(scenario())


def test_spawn_applies_auto_eat_defaults():
    async def scenario() -> None:
        bot = FakeBot()
        handle = MineflayerHandle(bot, asyncio.get_running_loop())
        connected: list[bool] = []
        handle.on(ClientEvent.CONNECTED, lambda: connected.append(True))

        handle.dispatch(ClientEvent.CONNECTED)
        await asyncio.sleep(0)

        assert connected == [True]
        assert bot.autoEat.options == {"priority": "foodPoints", "startAt": 14, "bannedFood": []}
        assert handle.username == "Agent"

    asyncio.run(scenario())


def test_auto_eat_failure_is_logged_not_raised(logged: list[dict[str, Any]]):
    async def scenario() -> None:
        bot = FakeBot()
        del bot.autoEat
        handle = MineflayerHandle(bot, asyncio.get_running_loop())
        connected: list[bool] = []
        handle.on(ClientEvent.CONNECTED, lambda: connected.append(True))

        handle.dispatch(ClientEvent.CONNECTED)
        await asyncio.sleep(0)

        assert connected == [True]

    asyncio.run(scenario())
    assert any(r["event_type"] == "AUTO_EAT_CONFIG_FAILED" for r in logged)


def test_quit_forwards_reason():
    async def scenario() -> None:
        bot = FakeBot()
        handle = MineflayerHandle(bot, asyncio.get_running_loop())
        handle.quit("shutdown")
        handle.quit()
        assert bot.quit_reasons == ["shutdown", "disconnect.quitting"]

    asyncio.run(scenario())


def test_viewer_sidecar_needs_a_bot():
    with pytest.raises(ViewerLaunchError):
        PrismarineViewerSidecar().launch(object(), ViewerOptions(bind_host="127.0.0.1", bind_port=3001))
