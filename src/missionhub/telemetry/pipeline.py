from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final

from missionhub.logs.queue import BoundedLogQueue, LogEntry, new_log_entry
from missionhub.telemetry.classifier import classify
from missionhub.telemetry.connection import ConnectionTracker
from missionhub.telemetry.events import (
    SEVERITY_INFO,
    SEVERITY_WARN,
    TRANSPORT_UNAVAILABLE,
    DecodeFailure,
    SubsystemEvent,
    TelemetryUpdate,
)
from missionhub.telemetry.formatter import format_subsystem_event
from missionhub.telemetry.merger import merge_position, merge_telemetry
from missionhub.telemetry.protocol import decode_envelope
from missionhub.telemetry.types import Position, TelemetrySnapshot

logger = logging.getLogger("missionhub.pipeline")

LINK_ESTABLISHED_MESSAGE: Final[str] = "SYSTEM: Mission control link established"
DEGRADED_MESSAGE: Final[str] = "SYSTEM: Event transport unavailable, running in degraded mode"

DEFAULT_POSITION: Final[Position] = Position(lat=47.6062, lon=-122.3321)


@dataclass(frozen=True)
class PipelineResult:
    """What one payload changed; `failure` is set when it was dropped."""

    snapshot_changed: bool = False
    position_changed: bool = False
    connection_changed: bool = False
    entries: tuple[LogEntry, ...] = ()
    failure: DecodeFailure | None = None


# ---------------------------------------- #


class EventPipeline:
    """
    Decode -> classify -> merge/format -> log queue, one payload at a time.

    The pipeline is the only writer of the snapshot, the position and the
    connection tracker; the log queue is written through it and by its own
    expiry callbacks. Callers must feed payloads from a single thread.
    """

    def __init__(
        self,
        log_queue: BoundedLogQueue,
        snapshot: TelemetrySnapshot | None = None,
        position: Position | None = None,
    ) -> None:
        self.log_queue = log_queue
        self.connection = ConnectionTracker()
        self._snapshot = snapshot or TelemetrySnapshot()
        self._position = position or DEFAULT_POSITION

    # ---------------------------------------- #

    @property
    def snapshot(self) -> TelemetrySnapshot:
        return self._snapshot

    @property
    def position(self) -> Position:
        return self._position

    # ---------------------------------------- #

    def handle_payload(self, raw: str) -> PipelineResult:
        decoded = decode_envelope(raw)
        if isinstance(decoded, DecodeFailure):
            return PipelineResult(failure=decoded)

        event = classify(decoded)
        entries: list[LogEntry] = []
        snapshot_changed = False
        position_changed = False

        connection_changed = self.connection.mark_connected()
        if connection_changed:
            logger.info("Connected: first event from %r", decoded.source or "<none>")
            self._push(entries, LINK_ESTABLISHED_MESSAGE, SEVERITY_INFO, decoded.timestamp)

        if isinstance(event, TelemetryUpdate):
            snapshot = merge_telemetry(self._snapshot, event.update)
            position = merge_position(self._position, event.update)
            snapshot_changed = snapshot != self._snapshot
            position_changed = position != self._position
            self._snapshot = snapshot
            self._position = position
        elif isinstance(event, SubsystemEvent):
            if not event.command.ok:
                logger.debug(
                    "Subsystem event from %r without descriptor (%s)",
                    decoded.source,
                    event.command.reason or event.command.status,
                )
            message, severity = format_subsystem_event(event.descriptor)
            self._push(entries, message, severity, decoded.timestamp)

        return PipelineResult(
            snapshot_changed=snapshot_changed,
            position_changed=position_changed,
            connection_changed=connection_changed,
            entries=tuple(entries),
        )

    # ---------------------------------------- #

    def transport_unavailable(self, reason: str = "") -> bool:
        """
        Fall back to CONNECTED when there is no event transport at all.

        Returns True if this flipped the connection latch.
        """
        logger.warning("%s: %s", TRANSPORT_UNAVAILABLE, reason or "no event source")
        if not self.connection.mark_connected(degraded=True):
            return False
        self._push([], DEGRADED_MESSAGE, SEVERITY_WARN, None)
        return True

    # ---------------------------------------- #

    def dismiss(self, entry_id: str) -> bool:
        return self.log_queue.dismiss(entry_id)

    def close(self) -> None:
        self.log_queue.clear()

    # ---------------------------------------- #

    def _push(
        self,
        entries: list[LogEntry],
        message: str,
        severity: str,
        timestamp: str | None,
    ) -> None:
        entry = self.log_queue.push(new_log_entry(message, severity, timestamp=timestamp))
        if entry is not None:
            entries.append(entry)
