"""
Reconnect attempt counter.

The backoff itself is a fixed delay with no retry budget; the supervisor
applies it directly. This module only counts attempts for logging.

This module contains NO timers, NO async, NO side effects.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ReconnectAttempt:
    """
    Immutable reconnect counter.

    Semantics:
    - attempt == 0 is the initial connection (no reconnect yet).
    - attempt >= 1 is the Nth reconnect since the last successful spawn.
    - Used for logging only; it never limits anything.
    """
    attempt: int


def next_attempt(current: ReconnectAttempt) -> ReconnectAttempt:
    """Return a new ReconnectAttempt with attempt incremented by 1."""
    return ReconnectAttempt(attempt=current.attempt + 1)


def reset_attempt() -> ReconnectAttempt:
    """Returns a fresh attempt counter."""
    return ReconnectAttempt(attempt=0)
