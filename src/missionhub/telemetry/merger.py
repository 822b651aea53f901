from __future__ import annotations

import dataclasses
import math
from typing import Any, Final, Mapping

from missionhub.telemetry.types import Position, TelemetrySnapshot

# Upstream key -> snapshot field, for the fields copied as-is.
_COPIED_FIELDS: Final[tuple[tuple[str, str], ...]] = (
    ("alt", "altitude"),
    ("battery_remaining", "battery"),
    ("heading", "heading"),
    ("gps_fix", "gps_fix"),
    ("errors_count", "errors_count"),
    ("vx", "vx"),
    ("vy", "vy"),
    ("vz", "vz"),
)


def _present(update: Mapping[str, Any], key: str) -> bool:
    # JSON null is treated like a missing key.
    return update.get(key) is not None


# ---------------------------------------- #


def compute_speed(vx_cms: float, vy_cms: float) -> float:
    """Horizontal ground speed in m/s from velocity components in cm/s."""
    return math.hypot(vx_cms / 100.0, vy_cms / 100.0)


# ---------------------------------------- #


def merge_telemetry(
    snapshot: TelemetrySnapshot, update: Mapping[str, Any]
) -> TelemetrySnapshot:
    """
    Fold a partial telemetry update into the snapshot.

    Each field takes the incoming value when present and keeps the previous
    value otherwise. An explicit JSON null counts as absent, so a null never
    overwrites a known value. Speed is only recomputed when vx and vy arrive
    together. Values are not clamped.
    """
    changes: dict[str, Any] = {}

    for key, name in _COPIED_FIELDS:
        if _present(update, key):
            changes[name] = update[key]

    status = update.get("system_status")
    if status:
        changes["status"] = str(status).upper()

    if _present(update, "vx") and _present(update, "vy"):
        try:
            changes["speed"] = compute_speed(float(update["vx"]), float(update["vy"]))
        except (TypeError, ValueError):
            # Non-numeric components leave the previous speed in place.
            pass

    if not changes:
        return snapshot
    return dataclasses.replace(snapshot, **changes)


# ---------------------------------------- #


def merge_position(position: Position, update: Mapping[str, Any]) -> Position:
    """Move the vehicle only when lat and lon are both truthy in one update."""
    lat = update.get("lat")
    lon = update.get("lon")
    if not (lat and lon):
        return position
    try:
        return Position(lat=float(lat), lon=float(lon))
    except (TypeError, ValueError):
        return position
