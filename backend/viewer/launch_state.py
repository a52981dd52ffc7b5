"""
Viewer launch state.

One value per process. Mutated only by ViewerLauncher.
"""
from enum import Enum


class ViewerLaunchState(str, Enum):
    """
    Process-wide sidecar lifecycle.

    NOT_STARTED -> STARTING -> READY, with STARTING -> NOT_STARTED on
    launch failure so a later session may try again.
    """
    NOT_STARTED = "not-started"
    STARTING = "starting"  # launch issued, settle delay pending
    READY = "ready"        # settle delay elapsed at least once
