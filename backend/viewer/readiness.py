"""
Readiness gate for viewer traffic.

The gate is a boolean plus a monotonic generation counter:
- issue_token() starts a new generation for a freshly connected session
- close() ends the current generation and shuts the gate
- open(token) succeeds only if token is the current generation

A settle timer scheduled for one session therefore can never open the gate
on behalf of a later one. Nothing here blocks or awaits.
"""

from __future__ import annotations


class ReadinessGate:
    """Whether the proxy may forward viewer traffic right now."""

    def __init__(self) -> None:
        self._is_open = False
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def is_open(self) -> bool:
        return self._is_open

    def issue_token(self) -> int:
        """Begin a new generation; returns its token. The gate stays closed."""
        self._generation += 1
        self._is_open = False
        return self._generation

    def is_current(self, token: int) -> bool:
        return token == self._generation

    def open(self, token: int) -> bool:
        """
        Open the gate for `token`.

        Returns False (and leaves the gate untouched) for stale tokens.
        """
        if token != self._generation:
            return False
        self._is_open = True
        return True

    def close(self) -> None:
        """Shut the gate and invalidate every outstanding token."""
        self._generation += 1
        self._is_open = False
