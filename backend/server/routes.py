"""
Route registration.

- GET /          liveness, always 200
- GET /health    liveness plus viewer / session status
- ANY /viewer/*  gated reverse proxy to the viewer sidecar (HTTP + WebSocket)
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request, Response, WebSocket
from fastapi.responses import PlainTextResponse

from constants import LIVENESS_BODY, VIEWER_PATH_PREFIX
from server.proxy import ViewerProxy


_PROXY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def register_routes(app: FastAPI) -> None:
    """Register all routes on the FastAPI app."""

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:  # pyright: ignore[reportUnusedFunction]
        return LIVENESS_BODY

    @app.get("/health")
    async def health() -> dict[str, Any]:  # pyright: ignore[reportUnusedFunction]
        launcher = app.state.launcher
        session = app.state.supervisor.session
        return {
            "status": "ok",
            "viewer_ready": app.state.gate.is_open(),
            "viewer_launch": launcher.state.value if launcher is not None else "disabled",
            "session_phase": session.phase.value if session is not None else None,
        }

    @app.api_route(VIEWER_PATH_PREFIX, methods=_PROXY_METHODS)
    async def viewer_root(request: Request) -> Response:  # pyright: ignore[reportUnusedFunction]
        proxy: ViewerProxy = app.state.proxy
        return await proxy.forward_http(request, "")

    @app.api_route(VIEWER_PATH_PREFIX + "/{path:path}", methods=_PROXY_METHODS)
    async def viewer_http(request: Request, path: str) -> Response:  # pyright: ignore[reportUnusedFunction]
        proxy: ViewerProxy = app.state.proxy
        return await proxy.forward_http(request, path)

    @app.websocket(VIEWER_PATH_PREFIX)
    async def viewer_ws_root(websocket: WebSocket) -> None:  # pyright: ignore[reportUnusedFunction]
        proxy: ViewerProxy = app.state.proxy
        await proxy.forward_websocket(websocket, "")

    @app.websocket(VIEWER_PATH_PREFIX + "/{path:path}")
    async def viewer_ws(websocket: WebSocket, path: str) -> None:  # pyright: ignore[reportUnusedFunction]
        proxy: ViewerProxy = app.state.proxy
        await proxy.forward_websocket(websocket, path)
