"""
prismarine-viewer sidecar (via JSPyBridge).

Starts the mineflayer web viewer for a bot on a loopback port. The viewer
keeps serving for the life of the Node process; there is no stop.
"""

from __future__ import annotations

from typing import Any

from protocol.viewer_sidecar import ViewerLaunchError, ViewerOptions


class PrismarineViewerSidecar:
    """ViewerSidecar backed by prismarine-viewer's mineflayer entry point."""

    def launch(self, handle: Any, options: ViewerOptions) -> None:
        bot = getattr(handle, "bot", None)
        if bot is None:
            raise ViewerLaunchError("client handle does not expose a mineflayer bot")

        try:
            from javascript import require  # pylint: disable=import-outside-toplevel

            viewer_pkg = require("prismarine-viewer")
            start_viewer = viewer_pkg.mineflayer
        except Exception as exc:  # pylint: disable=broad-exception-caught
            raise ViewerLaunchError(f"prismarine-viewer unavailable: {exc}") from exc

        if start_viewer is None:
            raise ViewerLaunchError("prismarine-viewer export not found")

        try:
            start_viewer(bot, {
                "host": options.bind_host,
                "port": options.bind_port,
                "firstPerson": options.first_person,
            })
        except Exception as exc:  # pylint: disable=broad-exception-caught
            raise ViewerLaunchError(f"{type(exc).__name__}: {exc}") from exc
