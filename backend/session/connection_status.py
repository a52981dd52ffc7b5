"""
Session phase tracking.

Phase is owned by GameSession and only ever moves forward:
CONNECTING -> ACTIVE -> TERMINATED, or CONNECTING -> TERMINATED.
"""
from enum import Enum

class SessionPhase(str, Enum):
    """
    Lifecycle phase of one connection attempt.

    A session is never reused once TERMINATED; the supervisor creates a new one.
    """
    CONNECTING = "connecting"  # connect issued, not yet spawned
    ACTIVE = "active"          # server accepted us and assigned our identity
    TERMINATED = "terminated"  # disconnected, kicked, or never connected
