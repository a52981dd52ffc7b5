"""
Application configuration.

Responsibilities:
- Load deployment-specific configuration
- Read environment variables
- Provide a typed, immutable config object

Non-responsibilities:
- No lifecycle logic
- No tuning constants (see constants.py)
- No runtime mutation
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from constants import DEFAULT_GAME_HOST, DEFAULT_GAME_PORT, DEFAULT_HTTP_PORT
from session.credentials import Credentials


_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUTHY


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class AppConfig:
    """
    Immutable application configuration.

    Constructed once at process startup and passed down to the app factory.
    """

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    env: str
    log_level: str

    # ------------------------------------------------------------------
    # Game server
    # ------------------------------------------------------------------

    mc_username: str | None
    mc_host: str
    mc_port: int
    mc_version: str | None

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    http_port: int

    # ------------------------------------------------------------------
    # Viewer
    # ------------------------------------------------------------------

    viewer_enabled: bool
    viewer_first_person: bool

    # ------------------------------------------------------------------
    # Derived
    # ------------------------------------------------------------------

    def credentials(self) -> Credentials:
        """Identity and target for every session opened by this process."""
        return Credentials(
            username=self.mc_username,
            host=self.mc_host,
            port=self.mc_port,
            version=self.mc_version,
        )

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @staticmethod
    def load_from_env() -> AppConfig:
        """
        Load configuration from environment variables.

        Raises:
            ValueError if a numeric variable cannot be parsed.
        """
        return AppConfig(
            env=os.environ.get("ENV", "dev"),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),

            mc_username=os.environ.get("MC_USERNAME") or None,
            mc_host=os.environ.get("MC_HOST") or DEFAULT_GAME_HOST,
            mc_port=_env_int("MC_PORT", DEFAULT_GAME_PORT),
            # Unset means "let the client auto-detect"
            mc_version=os.environ.get("MC_VERSION") or None,

            http_port=_env_int("PORT", DEFAULT_HTTP_PORT),

            viewer_enabled=_env_flag("VIEWER_ENABLED", True),
            viewer_first_person=_env_flag("VIEWER_FIRST_PERSON", False),
        )
