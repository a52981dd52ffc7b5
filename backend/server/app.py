"""
FastAPI app factory.

Responsibilities:
- Create and configure the FastAPI app
- Build the agent components once per process (gate, launcher, supervisor, proxy)
- Start the reconnect loop at application startup, stop it on shutdown
- Register routes
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from config import AppConfig
from constants import (
    RECONNECT_DELAY_S,
    VIEWER_BIND_HOST,
    VIEWER_BIND_PORT,
    VIEWER_SETTLE_DELAY_S,
)
from observability.logger import log_event, set_level
from orchestrator.supervisor import ReconnectSupervisor
from protocol.game_client import GameClient
from protocol.mineflayer_client import MineflayerClient
from protocol.prismarine_viewer import PrismarineViewerSidecar
from protocol.viewer_sidecar import ViewerOptions, ViewerSidecar
from server.proxy import ViewerProxy
from server.routes import register_routes
from viewer.launcher import ViewerLauncher
from viewer.readiness import ReadinessGate


def create_app(
    config: AppConfig | None = None,
    *,
    game_client: GameClient | None = None,
    sidecar: ViewerSidecar | None = None,
    http_client: httpx.AsyncClient | None = None,
    reconnect_delay_s: float = RECONNECT_DELAY_S,
    settle_delay_s: float = VIEWER_SETTLE_DELAY_S,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Collaborators default to the real mineflayer / prismarine-viewer bindings;
    tests inject fakes.
    """
    config = config or AppConfig.load_from_env()
    set_level(config.log_level)

    gate = ReadinessGate()

    launcher: ViewerLauncher | None = None
    if config.viewer_enabled:
        launcher = ViewerLauncher(
            sidecar=sidecar or PrismarineViewerSidecar(),
            gate=gate,
            options=ViewerOptions(
                bind_host=VIEWER_BIND_HOST,
                bind_port=VIEWER_BIND_PORT,
                first_person=config.viewer_first_person,
            ),
            settle_delay_s=settle_delay_s,
        )

    supervisor = ReconnectSupervisor(
        credentials=config.credentials(),
        client=game_client or MineflayerClient(),
        gate=gate,
        launcher=launcher,
        reconnect_delay_s=reconnect_delay_s,
    )

    proxy = ViewerProxy(
        gate=gate,
        upstream_host=VIEWER_BIND_HOST,
        upstream_port=VIEWER_BIND_PORT,
        http_client=http_client,
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        log_event({
            "event_type": "HTTP_LISTENING",
            "component": "WEB",
            "port": config.http_port,
        })
        supervisor.start()
        try:
            yield
        finally:
            await supervisor.stop()
            await proxy.aclose()

    app = FastAPI(title="Minecraft Viewer Agent", lifespan=lifespan)

    app.state.config = config
    app.state.gate = gate
    app.state.launcher = launcher
    app.state.supervisor = supervisor
    app.state.proxy = proxy

    register_routes(app)

    return app
