from __future__ import annotations

from typing import Any, Final, Mapping

from missionhub.telemetry.events import SEVERITIES, SEVERITY_INFO

MAX_DATA_POINTS: Final[int] = 2
DEFAULT_SUBSYSTEM: Final[str] = "SYSTEM"
UNKNOWN_EVENT: Final[str] = "Unknown Event"

# Priority order: when an event carries more than MAX_DATA_POINTS of these,
# the earliest listed keys win regardless of their order in the payload.
DATA_POINT_LABELS: Final[tuple[tuple[str, str], ...]] = (
    ("scan_area", "Scan Area"),
    ("resolution", "Resolution"),
    ("fps", "FPS"),
    ("max_temp", "Max Temp"),
    ("min_temp", "Min Temp"),
    ("anomalies", "Anomalies"),
    ("temp", "Temp"),
    ("limit", "Limit"),
    ("bandwidth", "Bandwidth"),
    ("latency", "Latency"),
    ("satellites", "Satellites"),
    ("strength", "Strength"),
    ("voltage", "Voltage"),
    ("expected", "Expected"),
    ("available", "Available"),
    ("used", "Used"),
    ("level", "Level"),
    ("threshold", "Threshold"),
    ("distance", "Distance"),
    ("boundary", "Boundary"),
    ("waypoint", "Waypoint"),
    ("eta_next", "Next ETA"),
    ("coverage", "Coverage"),
    ("images", "Images"),
    ("file_size", "File Size"),
    ("location", "Location"),
    ("pressure", "Pressure"),
    ("accuracy", "Accuracy"),
    ("backup_status", "Backup"),
    ("reason", "Reason"),
    ("eta", "ETA"),
)


# ---------------------------------------- #


def humanize_event_name(event: Any) -> str:
    if not event:
        return UNKNOWN_EVENT
    return str(event).replace("_", " ").title()


# ---------------------------------------- #


def data_point_fragments(data: Any) -> list[str]:
    if not isinstance(data, Mapping):
        return []

    fragments: list[str] = []
    for key, label in DATA_POINT_LABELS:
        value = data.get(key)
        if value is None or value == "":
            continue
        fragments.append(f"{label}: {value}")
        if len(fragments) == MAX_DATA_POINTS:
            break
    return fragments


# ---------------------------------------- #


def event_severity(level: Any) -> str:
    if isinstance(level, str) and level in SEVERITIES:
        return level
    return SEVERITY_INFO


# ---------------------------------------- #


def format_subsystem_event(descriptor: Mapping[str, Any]) -> tuple[str, str]:
    """
    Render a subsystem event descriptor as a single toast line.

    Returns (message, severity). Every descriptor field is optional; an empty
    descriptor renders as "SYSTEM: Unknown Event" at INFO.
    """
    details = descriptor.get("details")
    base = str(details) if details else humanize_event_name(descriptor.get("event"))

    fragments = data_point_fragments(descriptor.get("data"))
    if fragments:
        base = f"{base} ({', '.join(fragments)})"

    subsystem = descriptor.get("subsystem") or DEFAULT_SUBSYSTEM
    return f"{subsystem}: {base}", event_severity(descriptor.get("level"))
