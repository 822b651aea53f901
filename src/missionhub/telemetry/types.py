from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TelemetrySnapshot:
    """
    Current best-known vehicle state.

    Units follow the upstream telemetry source: altitude in meters, speed in
    m/s (derived), battery in percent, heading in degrees, velocity
    components in cm/s.
    """

    altitude: float = 120.0
    speed: float = 0.0
    battery: float = 95.0
    heading: float = 0.0
    status: str = "STANDBY"
    gps_fix: bool = True
    errors_count: int = 0
    vx: float | None = 0.0
    vy: float | None = 0.0
    vz: float | None = 0.0


@dataclass(frozen=True)
class Position:
    lat: float
    lon: float
