from __future__ import annotations

import math
from typing import Final

from missionhub.telemetry.events import SEVERITY_CRITICAL, SEVERITY_WARN

GREEN: Final[str] = "#4CAF50"
ORANGE: Final[str] = "#FF9800"
RED: Final[str] = "#F44336"
BLUE: Final[str] = "#2196F3"
GREY: Final[str] = "#9E9E9E"

_CARDINALS: Final[tuple[str, ...]] = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


def _as_float(value: object) -> float | None:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


# ---------------------------------------- #


def battery_color(level: float) -> str:
    value = _as_float(level)
    if value is None:
        return GREY
    if value > 50:
        return GREEN
    if value > 20:
        return ORANGE
    return RED


def battery_bar_fraction(level: float) -> float:
    # Presentation-only clamp; the snapshot keeps the raw value.
    value = _as_float(level)
    if value is None:
        return 0.0
    return max(0.0, min(100.0, value)) / 100.0


def cardinal_direction(degrees: float) -> str:
    value = _as_float(degrees)
    if value is None or not math.isfinite(value):
        return ""
    return _CARDINALS[math.floor(value / 45.0 + 0.5) % 8]


def status_color(status: str) -> str:
    s = str(status or "").lower()
    if s in ("active", "auto"):
        return GREEN
    if s == "standby":
        return BLUE
    if s == "critical":
        return RED
    return GREY


# ---------------------------------------- #


def severity_color(severity: str) -> str:
    if severity == SEVERITY_CRITICAL:
        return RED
    if severity == SEVERITY_WARN:
        return ORANGE
    return BLUE


def severity_icon(severity: str) -> str:
    if severity == SEVERITY_CRITICAL:
        return "\N{POLICE CARS REVOLVING LIGHT}"
    if severity == SEVERITY_WARN:
        return "\N{WARNING SIGN}"
    return "\N{INFORMATION SOURCE}"
