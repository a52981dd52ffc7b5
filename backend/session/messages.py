"""
Incoming message classification.

Only real chat from another player is surfaced. Everything else is noise:
- HUD channel messages (action bar) are dropped unconditionally
- Overlay text that leaked onto another channel (health / mana bars)
- Lines without a username (system lines; no name extraction attempted)
- Our own messages (prevents self-echo loops)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from constants import HUD_OVERLAY_PATTERNS
from protocol.game_client import MessageChannel, RawMessage


_OVERLAY_RES: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE if ignore_case else 0)
    for pattern, ignore_case in HUD_OVERLAY_PATTERNS
)


class MessageKind(str, Enum):
    CHAT = "chat"
    HUD = "hud"
    OVERLAY = "overlay"
    SYSTEM = "system"
    SELF = "self"


@dataclass(frozen=True)
class ChatMessage:
    username: str
    text: str


def is_hud_overlay(text: str) -> bool:
    """True if text looks like a status-bar overlay (e.g. `20/20❤`)."""
    return any(r.search(text) for r in _OVERLAY_RES)


def classify_message(message: RawMessage, self_username: str | None) -> MessageKind:
    """
    Classify a raw server message.

    Order matters: channel first, then overlay text, then the sender.
    """
    if message.channel is MessageChannel.HUD:
        return MessageKind.HUD

    if is_hud_overlay(message.text):
        return MessageKind.OVERLAY

    if not message.username:
        return MessageKind.SYSTEM

    if self_username is not None and message.username == self_username:
        return MessageKind.SELF

    return MessageKind.CHAT


def to_chat(message: RawMessage, self_username: str | None) -> ChatMessage | None:
    """Return a ChatMessage if the message should surface as chat, else None."""
    if classify_message(message, self_username) is not MessageKind.CHAT:
        return None
    assert message.username is not None
    return ChatMessage(username=message.username, text=message.text)
