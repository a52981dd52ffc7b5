"""
Viewer reverse proxy.

Forwards /viewer/* to the sidecar on its loopback port, but only while the
ReadinessGate is open:
- Gate closed: 503 (HTTP and WebSocket upgrades; 1013 close where the
  server cannot send a denial response), sidecar untouched
- Gate open: method, headers (host rewritten), body and query forwarded;
  upstream response streamed back verbatim minus hop-by-hop headers
- Sidecar unreachable anyway: 503 (or 1013), never an unhandled error
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable

import httpx
from fastapi import Request, WebSocket, WebSocketDisconnect
from fastapi.responses import PlainTextResponse, Response, StreamingResponse
from starlette.background import BackgroundTask
from starlette.websockets import WebSocketState
from websockets.asyncio.client import ClientConnection, connect as ws_connect
from websockets.exceptions import ConnectionClosed, InvalidHandshake

from constants import (
    HOP_BY_HOP_HEADERS,
    PROXY_CONNECT_TIMEOUT_S,
    VIEWER_NOT_READY_BODY,
    VIEWER_UNAVAILABLE_BODY,
    WS_CLOSE_TRY_AGAIN_LATER,
)
from observability.logger import log_event
from viewer.readiness import ReadinessGate


# Request headers we never copy upstream (httpx recomputes length)
_DROP_REQUEST_HEADERS = HOP_BY_HOP_HEADERS | {"host", "content-length"}

_DENIAL_RESPONSE_EXTENSION = "websocket.http.response"


def _upstream_error(exc: BaseException, *, path: str, transport: str) -> None:
    log_event({
        "event_type": "PROXY_UPSTREAM_ERROR",
        "component": "PROXY",
        "level": "WARNING",
        "transport": transport,
        "path": path,
        "exception": type(exc).__name__,
        "message": str(exc),
    })


class ViewerProxy:
    """Gate-aware HTTP + WebSocket proxy to the viewer sidecar."""

    def __init__(
        self,
        *,
        gate: ReadinessGate,
        upstream_host: str,
        upstream_port: int,
        http_client: httpx.AsyncClient | None = None,
        websocket_connect: Callable[..., Any] = ws_connect,
    ) -> None:
        self._gate = gate
        self._netloc = f"{upstream_host}:{upstream_port}"
        self._http_base = f"http://{self._netloc}"
        self._ws_base = f"ws://{self._netloc}"
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(None, connect=PROXY_CONNECT_TIMEOUT_S),
        )
        self._ws_connect = websocket_connect

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    async def forward_http(self, request: Request, path: str) -> Response:
        if not self._gate.is_open():
            return PlainTextResponse(VIEWER_NOT_READY_BODY, status_code=503)

        url = f"{self._http_base}/{path}"
        if request.url.query:
            url = f"{url}?{request.url.query}"

        headers = [
            (key, value)
            for key, value in request.headers.items()
            if key.lower() not in _DROP_REQUEST_HEADERS
        ]
        headers.append(("host", self._netloc))

        body = await request.body()
        upstream_request = self._client.build_request(
            request.method,
            url,
            headers=headers,
            content=body or None,
        )

        try:
            upstream = await self._client.send(upstream_request, stream=True)
        except httpx.TransportError as exc:
            _upstream_error(exc, path=path, transport="http")
            return PlainTextResponse(VIEWER_UNAVAILABLE_BODY, status_code=503)

        response = StreamingResponse(
            upstream.aiter_raw(),
            status_code=upstream.status_code,
            background=BackgroundTask(upstream.aclose),
        )
        for key, value in upstream.headers.multi_items():
            if key.lower() not in HOP_BY_HOP_HEADERS:
                response.headers.append(key, value)
        return response

    # ------------------------------------------------------------------
    # WebSocket
    # ------------------------------------------------------------------

    async def forward_websocket(self, websocket: WebSocket, path: str) -> None:
        if not self._gate.is_open():
            await self._refuse_websocket(websocket, VIEWER_NOT_READY_BODY)
            return

        uri = f"{self._ws_base}/{path}"
        if websocket.url.query:
            uri = f"{uri}?{websocket.url.query}"

        subprotocols = websocket.scope.get("subprotocols") or None

        try:
            upstream: ClientConnection = await self._ws_connect(
                uri,
                subprotocols=subprotocols,
                open_timeout=PROXY_CONNECT_TIMEOUT_S,
            )
        except (OSError, InvalidHandshake, TimeoutError) as exc:
            _upstream_error(exc, path=path, transport="websocket")
            await self._refuse_websocket(websocket, VIEWER_UNAVAILABLE_BODY)
            return

        try:
            await websocket.accept(subprotocol=upstream.subprotocol)
            await self._pump(websocket, upstream, path)
        finally:
            await upstream.close()

    async def _refuse_websocket(self, websocket: WebSocket, body: str) -> None:
        """
        Reject an upgrade before accepting it.

        Servers supporting the denial-response extension get a real 503;
        otherwise the handshake is closed with 1013.
        """
        if _DENIAL_RESPONSE_EXTENSION in (websocket.scope.get("extensions") or {}):
            await websocket.send_denial_response(PlainTextResponse(body, status_code=503))
            return
        await websocket.close(code=WS_CLOSE_TRY_AGAIN_LATER)

    async def _pump(
        self,
        websocket: WebSocket,
        upstream: ClientConnection,
        path: str,
    ) -> None:
        """Copy frames both ways until either side goes away."""

        async def client_to_upstream() -> None:
            while True:
                msg = await websocket.receive()
                if msg["type"] == "websocket.disconnect":
                    return
                if msg.get("text") is not None:
                    await upstream.send(msg["text"])
                elif msg.get("bytes") is not None:
                    await upstream.send(msg["bytes"])

        async def upstream_to_client() -> None:
            async for message in upstream:
                if isinstance(message, str):
                    await websocket.send_text(message)
                else:
                    await websocket.send_bytes(message)

        tasks = {
            asyncio.create_task(client_to_upstream()),
            asyncio.create_task(upstream_to_client()),
        }
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)

        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, (ConnectionClosed, WebSocketDisconnect)):
                _upstream_error(exc, path=path, transport="websocket")

        if (
            websocket.client_state is WebSocketState.CONNECTED
            and websocket.application_state is WebSocketState.CONNECTED
        ):
            await websocket.close()
