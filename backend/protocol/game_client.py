"""
Game-protocol client boundary.

The lifecycle code depends only on these shapes, never on a wire format.
Concrete bindings (see protocol.mineflayer_client) must:
- Deliver every callback on the asyncio loop thread
- Fire CONNECTED at most once, after the server assigns our identity
- Fire TERMINATED when the connection is gone for good
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Protocol


class GameClientError(Exception):
    """A connection could not even be attempted."""


class ClientEvent(str, Enum):
    """Events a client handle can report."""

    CONNECTED = "connected"      # callback()
    TERMINATED = "terminated"    # callback(reason: str | None)
    FAULTED = "faulted"          # callback(error: str)
    MESSAGE = "message"          # callback(message: RawMessage)


class MessageChannel(str, Enum):
    """Delivery channel of an incoming server message."""

    CHAT = "chat"
    SYSTEM = "system"
    HUD = "hud"  # action bar / overlay text, never chat


@dataclass(frozen=True)
class RawMessage:
    """One unclassified server message."""

    text: str
    channel: MessageChannel
    username: str | None = None


class ClientHandle(Protocol):
    """A live (or pending) connection returned by GameClient.connect()."""

    @property
    def username(self) -> str | None:
        """Identity assigned by the server; None until connected."""
        ...

    def on(self, event: ClientEvent, callback: Callable[..., Any]) -> None:
        """Subscribe to a client event."""
        ...

    def quit(self, reason: str | None = None) -> None:
        """Disconnect; TERMINATED follows."""
        ...


class GameClient(Protocol):
    """Factory for connections to the remote game server."""

    def connect(
        self,
        *,
        host: str,
        port: int,
        username: str | None,
        version: str | None,
    ) -> ClientHandle:
        """Start connecting. May raise GameClientError."""
        ...
