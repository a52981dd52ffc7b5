"""
Session lifecycle events.

Rules:
- Events describe facts that have occurred.
- Events carry data only (no behavior).
- Emitted by GameSession, consumed by synchronous listeners.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable


# =============================================================================
# Event Type Enumeration
# =============================================================================

class EventType(str, Enum):
    """Everything a GameSession can tell its subscribers."""

    CONNECTED = "CONNECTED"
    TERMINATED = "TERMINATED"
    FAULTED = "FAULTED"
    CHAT_RECEIVED = "CHAT_RECEIVED"


# =============================================================================
# Base Event
# =============================================================================

@dataclass(frozen=True)
class Event:
    """
    Base event type.

    All events must specify:
    - event_type: discriminant
    - ts_ms: wall-clock timestamp (or fake in tests)
    - session_id: the GameSession that emitted it
    """

    event_type: EventType
    ts_ms: int
    session_id: str


EventListener = Callable[[Event], None]


# =============================================================================
# Lifecycle Events
# =============================================================================

@dataclass(frozen=True)
class Connected(Event):
    """Server accepted the session and assigned our identity. Fires once."""
    username: str | None


@dataclass(frozen=True)
class Terminated(Event):
    """Session is over. Exactly one per session."""
    reason: str | None = None


@dataclass(frozen=True)
class Faulted(Event):
    """Non-fatal error reported by the client; logged only."""
    error: str


# =============================================================================
# Chat
# =============================================================================

@dataclass(frozen=True)
class ChatReceived(Event):
    """A classified chat line from another player."""
    username: str
    text: str
