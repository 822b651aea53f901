from __future__ import annotations

import logging
from typing import Callable, Protocol

from PySide6 import QtCore

from missionhub.logs.queue import BoundedLogQueue, LogEntry, Scheduler
from missionhub.logs.timers import QtScheduler
from missionhub.telemetry.pipeline import EventPipeline, PipelineResult
from missionhub.telemetry.protocol import TOPIC_BACKEND_EVENT
from missionhub.telemetry.types import Position, TelemetrySnapshot
from missionhub.util.config import ConsoleConfig

logger = logging.getLogger("missionhub.session")


class EventSource(Protocol):
    def listen(self, topic: str, handler: Callable[[str], None]) -> Callable[[], None]: ...


# ---------------------------------------- #


class ConsoleSession(QtCore.QObject):
    """
    Owns the pipeline for one console session and publishes its state.

    Payloads, expiry timers and dismissals all arrive on the Qt thread that
    owns the session, so every mutation is serialized by the event loop.
    """

    telemetry_changed = QtCore.Signal(object)
    position_changed = QtCore.Signal(object)
    logs_changed = QtCore.Signal(object)
    connection_changed = QtCore.Signal(str)

    # ---------------------------------------- #

    def __init__(
        self,
        config: ConsoleConfig | None = None,
        scheduler: Scheduler | None = None,
        parent=None,
    ):
        super().__init__(parent)

        cfg = config or ConsoleConfig()
        queue = BoundedLogQueue(
            scheduler=scheduler or QtScheduler(self),
            capacity=cfg.log_capacity,
            ttl_s=cfg.log_ttl_s,
            listener=self._on_logs_changed,
        )
        self.pipeline = EventPipeline(
            queue, position=Position(lat=cfg.home_lat, lon=cfg.home_lon)
        )
        self._unlisten: Callable[[], None] | None = None
        self._closed = False

    # ---------------------------------------- #

    @property
    def snapshot(self) -> TelemetrySnapshot:
        return self.pipeline.snapshot

    @property
    def position(self) -> Position:
        return self.pipeline.position

    @property
    def logs(self) -> tuple[LogEntry, ...]:
        return self.pipeline.log_queue.entries

    @property
    def connected(self) -> bool:
        return self.pipeline.connection.connected

    @property
    def degraded(self) -> bool:
        return self.pipeline.connection.degraded

    # ---------------------------------------- #

    def subscribe(self, source: EventSource | None) -> None:
        """
        Attach the inbound event channel for the lifetime of the session.

        With no source, or if subscribing fails, the session falls back to
        degraded CONNECTED mode instead of waiting for events forever.
        """
        if self._unlisten is not None:
            raise RuntimeError("Session already subscribed")

        if source is None:
            self.transport_unavailable("no event source")
            return

        try:
            self._unlisten = source.listen(TOPIC_BACKEND_EVENT, self.handle_payload)
        except Exception as e:
            self._unlisten = None
            self.transport_unavailable(f"subscribe failed: {e}")

    # ---------------------------------------- #

    @QtCore.Slot(str)
    def handle_payload(self, raw: str) -> PipelineResult:
        result = self.pipeline.handle_payload(raw)
        if result.snapshot_changed:
            self.telemetry_changed.emit(self.pipeline.snapshot)
        if result.position_changed:
            self.position_changed.emit(self.pipeline.position)
        if result.connection_changed:
            self.connection_changed.emit(self.pipeline.connection.status)
        return result

    # ---------------------------------------- #

    @QtCore.Slot(str)
    def transport_unavailable(self, reason: str = "") -> None:
        if self.pipeline.transport_unavailable(reason):
            self.connection_changed.emit(self.pipeline.connection.status)

    # ---------------------------------------- #

    @QtCore.Slot(str)
    def dismiss(self, entry_id: str) -> bool:
        return self.pipeline.dismiss(entry_id)

    def dismiss_all(self) -> None:
        self.pipeline.log_queue.clear()

    # ---------------------------------------- #

    def close(self) -> None:
        """Unsubscribe and cancel every pending entry timer. Idempotent."""
        if self._closed:
            return
        self._closed = True
        try:
            if self._unlisten is not None:
                self._unlisten()
        finally:
            self._unlisten = None
            self.pipeline.close()
            logger.info("Console session closed")

    # ---------------------------------------- #

    def _on_logs_changed(self, entries: tuple[LogEntry, ...]) -> None:
        self.logs_changed.emit(entries)
