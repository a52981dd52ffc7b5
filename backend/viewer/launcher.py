"""
Viewer launcher.

Responsibilities:
- Launch the rendering sidecar at most once per process (across reconnects)
- Arm the ReadinessGate for each connected session after the settle delay
- Roll back to NOT_STARTED on launch failure so a later session can retry

Non-responsibilities:
- Closing the gate (the supervisor wires that to session termination)
- Knowing anything about HTTP
"""

from __future__ import annotations

import asyncio
from asyncio import Task

from constants import VIEWER_SETTLE_DELAY_S
from observability.logger import log_event
from protocol.viewer_sidecar import ViewerOptions, ViewerSidecar
from session.game_session import GameSession
from viewer.launch_state import ViewerLaunchState
from viewer.readiness import ReadinessGate


class ViewerLauncher:
    """
    Owns ViewerLaunchState.

    Settle timers are never cancelled on disconnect; each carries the gate
    token of the session that scheduled it and the gate rejects stale ones.
    """

    def __init__(
        self,
        *,
        sidecar: ViewerSidecar,
        gate: ReadinessGate,
        options: ViewerOptions,
        settle_delay_s: float = VIEWER_SETTLE_DELAY_S,
    ) -> None:
        self._sidecar = sidecar
        self._gate = gate
        self._options = options
        self._settle_delay_s = settle_delay_s

        self._state = ViewerLaunchState.NOT_STARTED
        self._timers: set[Task[None]] = set()

    @property
    def state(self) -> ViewerLaunchState:
        return self._state

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def ensure_started(self, session: GameSession, token: int) -> None:
        """
        Make sure the sidecar is running and arm the gate for `token`.

        - NOT_STARTED: launch, then open the gate after the settle delay
        - STARTING: no relaunch; settle for this token as well
        - READY: no relaunch; open the gate now
        """
        if self._state is ViewerLaunchState.READY:
            log_event({
                "event_type": "VIEWER_ALREADY_STARTED",
                "component": "VIEWER",
                "session_id": session.session_id,
                "state": self._state.value,
            })
            self._open_gate(token, session.session_id)
            return

        if self._state is ViewerLaunchState.STARTING:
            log_event({
                "event_type": "VIEWER_ALREADY_STARTED",
                "component": "VIEWER",
                "session_id": session.session_id,
                "state": self._state.value,
            })
            self._schedule_settle(token, session.session_id)
            return

        self._state = ViewerLaunchState.STARTING
        log_event({
            "event_type": "VIEWER_STARTING",
            "component": "VIEWER",
            "session_id": session.session_id,
            "host": self._options.bind_host,
            "port": self._options.bind_port,
            "first_person": self._options.first_person,
        })

        try:
            self._sidecar.launch(session.handle, self._options)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            self._state = ViewerLaunchState.NOT_STARTED
            log_event({
                "event_type": "VIEWER_LAUNCH_FAILED",
                "component": "VIEWER",
                "level": "ERROR",
                "session_id": session.session_id,
                "exception": type(exc).__name__,
                "message": str(exc),
            })
            return

        self._schedule_settle(token, session.session_id)

    def shutdown(self) -> None:
        """Cancel pending settle timers. Used on process shutdown."""
        for task in self._timers:
            task.cancel()
        self._timers.clear()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _schedule_settle(self, token: int, session_id: str) -> None:
        task = asyncio.create_task(self._settle(token, session_id))
        self._timers.add(task)
        task.add_done_callback(self._timers.discard)

    async def _settle(self, token: int, session_id: str) -> None:
        try:
            await asyncio.sleep(self._settle_delay_s)
        except asyncio.CancelledError:
            return

        # The sidecar has settled regardless of which session is current now
        if self._state is ViewerLaunchState.STARTING:
            self._state = ViewerLaunchState.READY

        self._open_gate(token, session_id)

    def _open_gate(self, token: int, session_id: str) -> None:
        if self._gate.open(token):
            log_event({
                "event_type": "VIEWER_READY",
                "component": "VIEWER",
                "session_id": session_id,
                "token": token,
            })
            return

        log_event({
            "event_type": "VIEWER_STALE_READY_IGNORED",
            "component": "VIEWER",
            "level": "DEBUG",
            "session_id": session_id,
            "token": token,
            "current_token": self._gate.generation,
        })
