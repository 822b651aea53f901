"""
Shared pytest fixtures for the missionhub test suite.
"""

from __future__ import annotations

import json
import os
from typing import Any, Callable

import pytest

from missionhub.logs.queue import BoundedLogQueue
from missionhub.telemetry.pipeline import EventPipeline


class ManualHandle:
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Fake clock: callbacks only run when the test calls advance()."""

    def __init__(self) -> None:
        self.now = 0.0
        self.handles: list[ManualHandle] = []

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(self.now + delay_s, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> list[ManualHandle]:
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def advance(self, seconds: float) -> None:
        self.now += seconds
        for handle in sorted(self.pending, key=lambda h: h.due):
            if handle.due <= self.now and not handle.cancelled:
                handle.fired = True
                handle.callback()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def log_queue(scheduler: ManualScheduler) -> BoundedLogQueue:
    return BoundedLogQueue(scheduler=scheduler, capacity=5, ttl_s=8.0)


@pytest.fixture
def pipeline(log_queue: BoundedLogQueue) -> EventPipeline:
    return EventPipeline(log_queue)


@pytest.fixture
def make_envelope() -> Callable[..., str]:
    """Build a raw backend envelope the way the bridge emits them."""

    def build(source: str, data: Any = None, message: str = "", timestamp: str = "12:00:00") -> str:
        return json.dumps(
            {"timestamp": timestamp, "source": source, "message": message, "data": data}
        )

    return build


@pytest.fixture
def payload_envelope(make_envelope) -> Callable[[dict[str, Any]], str]:
    """Envelope for a subsystem event descriptor, JSON-encoded into data.command."""

    def build(descriptor: dict[str, Any], timestamp: str = "12:00:00") -> str:
        command = json.dumps(descriptor)
        return make_envelope(
            "PAYLOAD", {"command": command, "sender": "10.0.0.5:5000"}, timestamp=timestamp
        )

    return build


@pytest.fixture(scope="session")
def qapp():
    """One QApplication for every Qt test; widgets render offscreen."""
    QtWidgets = pytest.importorskip("PySide6.QtWidgets")
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
    yield app
