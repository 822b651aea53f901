from __future__ import annotations

from typing import Final

DISCONNECTED: Final[str] = "DISCONNECTED"
CONNECTED: Final[str] = "CONNECTED"


class ConnectionTracker:
    """One-way latch: DISCONNECTED until the first event, then CONNECTED."""

    def __init__(self) -> None:
        self._status = DISCONNECTED
        self._degraded = False

    # ---------------------------------------- #

    @property
    def status(self) -> str:
        return self._status

    @property
    def connected(self) -> bool:
        return self._status == CONNECTED

    @property
    def degraded(self) -> bool:
        return self._degraded

    # ---------------------------------------- #

    def mark_connected(self, degraded: bool = False) -> bool:
        """Latch CONNECTED. Returns True only for the transition itself."""
        if self._status == CONNECTED:
            return False
        self._status = CONNECTED
        self._degraded = degraded
        return True
