"""
Rendering sidecar boundary.

The sidecar renders the bot's world over HTTP/WebSocket on a loopback port.
It has no readiness callback: launch() returning only means the launch was
issued, not that the port is accepting connections.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


class ViewerLaunchError(Exception):
    """The sidecar could not be initialized."""


@dataclass(frozen=True)
class ViewerOptions:
    bind_host: str
    bind_port: int
    first_person: bool = False


class ViewerSidecar(Protocol):
    def launch(self, handle: Any, options: ViewerOptions) -> None:
        """
        Start rendering for the given client handle.

        Raises:
            ViewerLaunchError (or anything else) on failure.
        """
        ...
