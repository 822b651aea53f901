from __future__ import annotations

from missionhub.telemetry.events import ClassifiedEvent, RawEnvelope, SubsystemEvent, TelemetryUpdate
from missionhub.telemetry.protocol import SOURCE_DRONE, decode_command


def classify(envelope: RawEnvelope) -> ClassifiedEvent:
    """
    Route a decoded envelope by source.

    DRONE envelopes carry a partial telemetry update in data; every other
    source, including a missing one, is a subsystem event whose descriptor
    sits JSON-encoded in data.command.
    """
    if envelope.source == SOURCE_DRONE:
        return TelemetryUpdate(envelope=envelope, update=dict(envelope.data or {}))

    return SubsystemEvent(envelope=envelope, command=decode_command(envelope.data))
