"""
Mineflayer game client (via JSPyBridge).

Implements protocol.game_client.GameClient on top of the Node `mineflayer`
library, with the pathfinder and auto-eat plugins loaded.

JSPyBridge invokes JS event handlers on its own thread. Every callback is
re-posted to the asyncio loop that called connect(), so the rest of the agent
only ever runs on one thread.

The `javascript` package starts a Node process on import, so it is imported
on first connect rather than at module load.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Any, Callable

from constants import AUTO_EAT_PRIORITY, AUTO_EAT_START_AT
from observability.logger import log_event
from protocol.game_client import (
    ClientEvent,
    GameClientError,
    MessageChannel,
    RawMessage,
)


# mineflayer `message` positions
_POSITION_HUD = "game_info"
_POSITION_SYSTEM = "system"


def _text_of(json_msg: Any) -> str:
    """Plain text of a prismarine-chat ChatMessage proxy."""
    if json_msg is None:
        return ""
    try:
        return str(json_msg.toString())
    except Exception:  # pylint: disable=broad-exception-caught
        return str(json_msg)


class MineflayerHandle:
    """ClientHandle for one mineflayer bot."""

    def __init__(self, bot: Any, loop: asyncio.AbstractEventLoop) -> None:
        self.bot = bot
        self._loop = loop
        self._callbacks: dict[ClientEvent, list[Callable[..., Any]]] = defaultdict(list)

    @property
    def username(self) -> str | None:
        try:
            name = self.bot.username
        except Exception:  # pylint: disable=broad-exception-caught
            return None
        return str(name) if name else None

    def on(self, event: ClientEvent, callback: Callable[..., Any]) -> None:
        self._callbacks[event].append(callback)

    def quit(self, reason: str | None = None) -> None:
        try:
            self.bot.quit(reason or "disconnect.quitting")
        except Exception as exc:  # pylint: disable=broad-exception-caught
            # The bot is unusable; make sure the session still ends
            self.dispatch(ClientEvent.TERMINATED, f"quit_failed: {exc}")

    # ------------------------------------------------------------------
    # Bridge-thread entry point
    # ------------------------------------------------------------------

    def dispatch(self, event: ClientEvent, *args: Any) -> None:
        """Thread-safe: schedule callbacks for `event` on the loop."""
        self._loop.call_soon_threadsafe(self._fire, event, args)

    def _fire(self, event: ClientEvent, args: tuple[Any, ...]) -> None:
        if event is ClientEvent.CONNECTED:
            self._configure_auto_eat()
        for callback in tuple(self._callbacks[event]):
            callback(*args)

    def _configure_auto_eat(self) -> None:
        try:
            self.bot.autoEat.options = {
                "priority": AUTO_EAT_PRIORITY,
                "startAt": AUTO_EAT_START_AT,
                "bannedFood": [],
            }
        except Exception as exc:  # pylint: disable=broad-exception-caught
            log_event({
                "event_type": "AUTO_EAT_CONFIG_FAILED",
                "component": "SPAWN",
                "level": "WARNING",
                "message": str(exc),
            })


class MineflayerClient:
    """GameClient backed by mineflayer."""

    def connect(
        self,
        *,
        host: str,
        port: int,
        username: str | None,
        version: str | None,
    ) -> MineflayerHandle:
        try:
            from javascript import On, Once, require  # pylint: disable=import-outside-toplevel
        except Exception as exc:  # pylint: disable=broad-exception-caught
            raise GameClientError(f"JavaScript bridge unavailable: {exc}") from exc

        loop = asyncio.get_running_loop()

        options: dict[str, Any] = {"host": host, "port": port}
        if username:
            options["username"] = username
        # Omitted version == auto-detect
        if version:
            options["version"] = version

        try:
            mineflayer = require("mineflayer")
            pathfinder = require("mineflayer-pathfinder").pathfinder
            auto_eat = require("mineflayer-auto-eat").plugin

            bot = mineflayer.createBot(options)
            bot.loadPlugin(pathfinder)
            bot.loadPlugin(auto_eat)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            raise GameClientError(f"{type(exc).__name__}: {exc}") from exc

        handle = MineflayerHandle(bot, loop)

        # Handlers below run on the bridge thread; dispatch() hops to the loop.

        @Once(bot, "spawn")
        def _spawn(this: Any, *args: Any) -> None:  # pylint: disable=unused-argument
            handle.dispatch(ClientEvent.CONNECTED)

        @On(bot, "end")
        def _end(this: Any, reason: Any = None, *args: Any) -> None:  # pylint: disable=unused-argument
            handle.dispatch(ClientEvent.TERMINATED, None if reason is None else str(reason))

        @On(bot, "error")
        def _error(this: Any, err: Any = None, *args: Any) -> None:  # pylint: disable=unused-argument
            message = getattr(err, "message", None) or str(err)
            handle.dispatch(ClientEvent.FAULTED, str(message))

        @On(bot, "kicked")
        def _kicked(this: Any, reason: Any = None, *args: Any) -> None:  # pylint: disable=unused-argument
            handle.dispatch(ClientEvent.FAULTED, f"kicked: {reason}")

        @On(bot, "chat")
        def _chat(this: Any, username: Any = None, message: Any = None, *args: Any) -> None:  # pylint: disable=unused-argument
            handle.dispatch(
                ClientEvent.MESSAGE,
                RawMessage(
                    text="" if message is None else str(message),
                    channel=MessageChannel.CHAT,
                    username=str(username) if username else None,
                ),
            )

        @On(bot, "actionBar")
        def _action_bar(this: Any, json_msg: Any = None, *args: Any) -> None:  # pylint: disable=unused-argument
            handle.dispatch(
                ClientEvent.MESSAGE,
                RawMessage(text=_text_of(json_msg), channel=MessageChannel.HUD),
            )

        @On(bot, "message")
        def _message(this: Any, json_msg: Any = None, position: Any = None, *args: Any) -> None:  # pylint: disable=unused-argument
            # Player chat arrives through "chat" above; only route the rest
            if position == _POSITION_HUD:
                channel = MessageChannel.HUD
            elif position == _POSITION_SYSTEM:
                channel = MessageChannel.SYSTEM
            else:
                return
            handle.dispatch(
                ClientEvent.MESSAGE,
                RawMessage(text=_text_of(json_msg), channel=channel),
            )

        return handle
