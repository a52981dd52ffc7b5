"""
CONSTANTS
---------
Single source of truth for behavioral tuning of the agent.

Rules:
- If changing a value changes runtime behavior, it belongs here.
- No magic numbers elsewhere in the codebase.
- Deployment-specific values (hosts, credentials) live in config.py instead.
"""

from __future__ import annotations

from typing import Final, Tuple

# =============================================================================
# Reconnect loop
# =============================================================================

# Fixed backoff; never exponential, never bounded in attempts.
RECONNECT_DELAY_S: Final[float] = 5.0

# =============================================================================
# Viewer sidecar
# =============================================================================

VIEWER_BIND_HOST: Final[str] = "127.0.0.1"
VIEWER_BIND_PORT: Final[int] = 3001

# Sidecar exposes no readiness callback; wait this long after launch.
VIEWER_SETTLE_DELAY_S: Final[float] = 1.5

# =============================================================================
# Game connection defaults
# =============================================================================

DEFAULT_GAME_HOST: Final[str] = "localhost"
DEFAULT_GAME_PORT: Final[int] = 25565

# =============================================================================
# HTTP surface
# =============================================================================

DEFAULT_HTTP_PORT: Final[int] = 3000
VIEWER_PATH_PREFIX: Final[str] = "/viewer"

LIVENESS_BODY: Final[str] = "Minecraft bot is running"
VIEWER_NOT_READY_BODY: Final[str] = "Viewer not ready"
VIEWER_UNAVAILABLE_BODY: Final[str] = "Viewer unavailable"

# RFC 6455 "try again later"
WS_CLOSE_TRY_AGAIN_LATER: Final[int] = 1013

# Never forwarded in either direction
HOP_BY_HOP_HEADERS: Final[frozenset[str]] = frozenset({
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailer",
    "transfer-encoding",
    "upgrade",
})

# =============================================================================
# Message classification
# =============================================================================

# (pattern, case_insensitive) for status-bar overlays that leak into chat
HUD_OVERLAY_PATTERNS: Final[Tuple[Tuple[str, bool], ...]] = (
    (r"\d+/\d+\??\s+.*Mana", True),
    (r"\d+/\d+❤", False),
)

# =============================================================================
# Auto-eat plugin defaults
# =============================================================================

AUTO_EAT_PRIORITY: Final[str] = "foodPoints"
AUTO_EAT_START_AT: Final[int] = 14

# =============================================================================
# Proxy transport
# =============================================================================

# Fail fast when the sidecar is down; streamed reads are unbounded
PROXY_CONNECT_TIMEOUT_S: Final[float] = 2.0
