"""
Session identity and target.

Opaque to the lifecycle code; only the game-client binding interprets it.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Credentials:
    """
    Who to log in as and where.

    username / version of None defer to the client's own defaults
    (offline name, protocol auto-detection).
    """

    username: str | None
    host: str
    port: int
    version: str | None = None
