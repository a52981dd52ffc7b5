"""
Game session (one connection attempt).

Responsibilities:
- Open one connection through the injected GameClient
- Track SessionPhase (CONNECTING -> ACTIVE -> TERMINATED)
- Translate client callbacks into lifecycle events
- Classify incoming messages; only real chat becomes ChatReceived

Guarantees:
- open() never raises; failures become FAULTED then TERMINATED
- CONNECTED fires at most once and always before TERMINATED
- TERMINATED fires exactly once per session
- Listeners run synchronously, in registration order

Not responsible for:
- Retrying (ReconnectSupervisor does that)
- Viewer launch or readiness (they subscribe to our events)
"""

from __future__ import annotations

import time
from collections import defaultdict
from typing import Any
from uuid import uuid4

from observability.logger import log_event
from orchestrator.events import (
    ChatReceived,
    Connected,
    Event,
    EventListener,
    EventType,
    Faulted,
    Terminated,
)
from protocol.game_client import ClientEvent, ClientHandle, GameClient, RawMessage
from session.connection_status import SessionPhase
from session.credentials import Credentials
from session.messages import to_chat


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def _new_session_id() -> str:
    return f"sess_{uuid4().hex[:12]}"


class GameSession:
    """One live connection to the game server; never reused."""

    def __init__(
        self,
        *,
        credentials: Credentials,
        client: GameClient,
    ) -> None:
        self.session_id = _new_session_id()
        self.credentials = credentials
        self.phase = SessionPhase.CONNECTING
        self.handle: ClientHandle | None = None
        self.created_at = time.time()

        self._client = client
        self._listeners: dict[EventType, list[EventListener]] = defaultdict(list)
        self._username: str | None = None

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def subscribe(self, event_type: EventType, listener: EventListener) -> None:
        """Register a listener. Must happen before open()."""
        self._listeners[event_type].append(listener)

    @property
    def username(self) -> str | None:
        """Identity assigned by the server, once connected."""
        return self._username

    @property
    def is_active(self) -> bool:
        return self.phase is SessionPhase.ACTIVE

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        """
        Start connecting.

        Does not retry. If the client refuses to even start, the session
        reports the fault and terminates immediately so the supervisor
        can schedule the next attempt.
        """
        creds = self.credentials
        log_event({
            "event_type": "SESSION_OPENING",
            "component": "BOT",
            "session_id": self.session_id,
            "host": creds.host,
            "port": creds.port,
            "username": creds.username,
            "version": creds.version,
        })

        try:
            handle = self._client.connect(
                host=creds.host,
                port=creds.port,
                username=creds.username,
                version=creds.version,
            )
        except Exception as exc:  # pylint: disable=broad-exception-caught
            self._on_faulted(f"{type(exc).__name__}: {exc}")
            self._on_terminated("connect_failed")
            return

        self.handle = handle
        handle.on(ClientEvent.CONNECTED, self._on_connected)
        handle.on(ClientEvent.TERMINATED, self._on_terminated)
        handle.on(ClientEvent.FAULTED, self._on_faulted)
        handle.on(ClientEvent.MESSAGE, self._on_message)

    def close(self, reason: str | None = None) -> None:
        """Ask the client to disconnect. TERMINATED follows from the client."""
        if self.phase is SessionPhase.TERMINATED or self.handle is None:
            return
        self.handle.quit(reason)

    # ------------------------------------------------------------------
    # Client callbacks
    # ------------------------------------------------------------------

    def _on_connected(self, *_: Any) -> None:
        if self.phase is not SessionPhase.CONNECTING:
            return

        self.phase = SessionPhase.ACTIVE
        self._username = self.handle.username if self.handle is not None else None

        log_event({
            "event_type": "BOT_SPAWNED",
            "component": "SPAWN",
            "session_id": self.session_id,
            "username": self._username,
        })

        self._emit(Connected(
            event_type=EventType.CONNECTED,
            ts_ms=_now_ms(),
            session_id=self.session_id,
            username=self._username,
        ))

    def _on_terminated(self, reason: Any = None) -> None:
        if self.phase is SessionPhase.TERMINATED:
            return

        self.phase = SessionPhase.TERMINATED

        self._emit(Terminated(
            event_type=EventType.TERMINATED,
            ts_ms=_now_ms(),
            session_id=self.session_id,
            reason=None if reason is None else str(reason),
        ))

    def _on_faulted(self, error: Any) -> None:
        if self.phase is SessionPhase.TERMINATED:
            return

        log_event({
            "event_type": "BOT_ERROR",
            "component": "BOT",
            "level": "ERROR",
            "session_id": self.session_id,
            "error": str(error),
        })

        self._emit(Faulted(
            event_type=EventType.FAULTED,
            ts_ms=_now_ms(),
            session_id=self.session_id,
            error=str(error),
        ))

    def _on_message(self, message: RawMessage) -> None:
        if self.phase is not SessionPhase.ACTIVE:
            return

        chat = to_chat(message, self._username)
        if chat is None:
            return

        self._emit(ChatReceived(
            event_type=EventType.CHAT_RECEIVED,
            ts_ms=_now_ms(),
            session_id=self.session_id,
            username=chat.username,
            text=chat.text,
        ))

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _emit(self, event: Event) -> None:
        for listener in tuple(self._listeners[event.event_type]):
            listener(event)
