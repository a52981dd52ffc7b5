"""
Reconnect supervisor.

Drives create -> observe termination -> wait -> recreate, forever.

Per session, listeners are registered in this order:
- TERMINATED: gate.close() first, then the supervisor's own handler
- CONNECTED: gate token issued, then viewer launcher armed
- CHAT_RECEIVED: logged (faults are logged by the session itself)

Because close() is a direct synchronous listener that runs before the
supervisor schedules anything, there is no window where the gate is open
without an active session.
"""

from __future__ import annotations

import asyncio
from asyncio import Task
from typing import Callable

from constants import RECONNECT_DELAY_S
from observability.logger import log_event
from orchestrator.events import ChatReceived, Connected, Event, EventType, Terminated
from orchestrator.retry import ReconnectAttempt, next_attempt, reset_attempt
from protocol.game_client import GameClient
from session.credentials import Credentials
from session.game_session import GameSession
from viewer.launcher import ViewerLauncher
from viewer.readiness import ReadinessGate


SessionFactory = Callable[..., GameSession]


class ReconnectSupervisor:
    """Owns the single live GameSession of the process."""

    def __init__(
        self,
        *,
        credentials: Credentials,
        client: GameClient,
        gate: ReadinessGate,
        launcher: ViewerLauncher | None = None,
        reconnect_delay_s: float = RECONNECT_DELAY_S,
        session_factory: SessionFactory = GameSession,
    ) -> None:
        self._credentials = credentials
        self._client = client
        self._gate = gate
        self._launcher = launcher
        self._reconnect_delay_s = reconnect_delay_s
        self._session_factory = session_factory

        self._session: GameSession | None = None
        self._attempt: ReconnectAttempt = reset_attempt()
        self._reconnect_task: Task[None] | None = None
        self._stopped = False

        self.sessions_created = 0

    @property
    def session(self) -> GameSession | None:
        """The current session (connecting or active), if any."""
        return self._session

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Create the first session. Must run on the event loop."""
        self._stopped = False
        self._spawn()

    async def stop(self) -> None:
        """Abandon the loop: cancel any pending reconnect and close the session."""
        self._stopped = True

        task = self._reconnect_task
        self._reconnect_task = None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        if self._session is not None:
            self._session.close("shutdown")

        if self._launcher is not None:
            self._launcher.shutdown()

    # ------------------------------------------------------------------
    # Session wiring
    # ------------------------------------------------------------------

    def _spawn(self) -> None:
        session = self._session_factory(
            credentials=self._credentials,
            client=self._client,
        )
        self._session = session
        self.sessions_created += 1

        # Order matters: the gate closes before anything else sees TERMINATED
        session.subscribe(EventType.TERMINATED, lambda _event: self._gate.close())
        session.subscribe(EventType.TERMINATED, self._on_terminated)
        session.subscribe(EventType.CONNECTED, self._on_connected)
        session.subscribe(EventType.CHAT_RECEIVED, self._on_chat)

        session.open()

    def _on_connected(self, event: Event) -> None:
        assert isinstance(event, Connected)
        session = self._session
        if session is None or session.session_id != event.session_id:
            return

        self._attempt = reset_attempt()
        token = self._gate.issue_token()

        if self._launcher is not None:
            self._launcher.ensure_started(session, token)

    def _on_terminated(self, event: Event) -> None:
        assert isinstance(event, Terminated)
        if self._session is not None and self._session.session_id == event.session_id:
            self._session = None

        # No retry budget: every termination schedules another attempt
        if self._stopped:
            return

        self._attempt = next_attempt(self._attempt)
        delay_s = self._reconnect_delay_s

        log_event({
            "event_type": "BOT_DISCONNECTED",
            "component": "BOT",
            "level": "WARNING",
            "session_id": event.session_id,
            "reason": event.reason,
        })
        log_event({
            "event_type": "RECONNECT_SCHEDULED",
            "component": "BOT",
            "attempt": self._attempt.attempt,
            "delay_s": delay_s,
        })

        self._reconnect_task = asyncio.create_task(self._reconnect_after(delay_s))

    def _on_chat(self, event: Event) -> None:
        assert isinstance(event, ChatReceived)
        log_event({
            "event_type": "CHAT",
            "component": "CHAT",
            "session_id": event.session_id,
            "username": event.username,
            "message": event.text,
        })

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    async def _reconnect_after(self, delay_s: float) -> None:
        try:
            await asyncio.sleep(delay_s)
        except asyncio.CancelledError:
            return

        self._reconnect_task = None
        if self._stopped:
            return
        self._spawn()
