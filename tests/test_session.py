"""
Tests for the Qt console session and the bridge worker's listen/unlisten seam.
"""

from __future__ import annotations

import pytest

QtCore = pytest.importorskip("PySide6.QtCore")

from missionhub.console.session import ConsoleSession  # noqa: E402
from missionhub.telemetry.pipeline import DEGRADED_MESSAGE, LINK_ESTABLISHED_MESSAGE  # noqa: E402
from missionhub.telemetry.protocol import TOPIC_BACKEND_EVENT  # noqa: E402
from missionhub.telemetry.worker import BridgeWorker  # noqa: E402
from missionhub.util.config import ConsoleConfig  # noqa: E402


class FakeSource:
    def __init__(self) -> None:
        self.handlers: dict[str, list] = {}
        self.unlistened = 0

    def listen(self, topic, handler):
        self.handlers.setdefault(topic, []).append(handler)

        def unlisten():
            self.handlers[topic].remove(handler)
            self.unlistened += 1

        return unlisten

    def publish(self, topic, payload):
        for handler in list(self.handlers.get(topic, [])):
            handler(payload)


class BrokenSource:
    def listen(self, topic, handler):
        raise ConnectionError("event bus down")


@pytest.fixture
def session(qapp, scheduler):
    s = ConsoleSession(config=ConsoleConfig(log_capacity=3, log_ttl_s=2.0), scheduler=scheduler)
    yield s
    s.close()


def _record(signal) -> list:
    seen: list = []
    signal.connect(lambda value: seen.append(value))
    return seen


# ---------------------------------------- #


def test_session_uses_configured_home(session):
    assert session.position.lat == ConsoleConfig().home_lat
    assert not session.connected


def test_payloads_flow_through_subscription(session, make_envelope):
    source = FakeSource()
    telemetry = _record(session.telemetry_changed)
    connection = _record(session.connection_changed)
    logs = _record(session.logs_changed)

    session.subscribe(source)
    source.publish(TOPIC_BACKEND_EVENT, make_envelope("DRONE", {"alt": 200}))
    source.publish(TOPIC_BACKEND_EVENT, "{not json")

    assert session.connected
    assert connection == ["CONNECTED"]
    assert [t.altitude for t in telemetry] == [200]
    assert [e.message for e in logs[-1]] == [LINK_ESTABLISHED_MESSAGE]


def test_logs_follow_configured_capacity_and_ttl(session, payload_envelope, scheduler):
    session.subscribe(None)
    for i in range(4):
        session.handle_payload(payload_envelope({"event": f"EVENT_{i}"}))

    assert len(session.logs) == 3
    scheduler.advance(2.0)
    assert session.logs == ()


def test_subscribe_twice_is_an_error(session):
    session.subscribe(FakeSource())
    with pytest.raises(RuntimeError):
        session.subscribe(FakeSource())


def test_no_source_enters_degraded_mode(session):
    connection = _record(session.connection_changed)
    session.subscribe(None)

    assert session.connected
    assert session.degraded
    assert connection == ["CONNECTED"]
    assert [e.message for e in session.logs] == [DEGRADED_MESSAGE]


def test_failing_source_enters_degraded_mode(session):
    session.subscribe(BrokenSource())
    assert session.degraded


def test_close_unsubscribes_and_clears(session, payload_envelope, scheduler):
    source = FakeSource()
    session.subscribe(source)
    source.publish(TOPIC_BACKEND_EVENT, payload_envelope({"event": "A"}))
    assert session.logs

    session.close()
    session.close()

    assert source.unlistened == 1
    assert session.logs == ()
    assert scheduler.pending == []


def test_dismiss(session, payload_envelope):
    result = session.handle_payload(payload_envelope({"event": "A"}))
    entry = result.entries[-1]
    assert session.dismiss(entry.id)
    session.dismiss_all()
    assert session.logs == ()


# ---------------------------------------- #


def test_worker_listen_filters_by_topic(qapp):
    worker = BridgeWorker()
    received: list[str] = []
    unlisten = worker.listen(TOPIC_BACKEND_EVENT, received.append)

    worker.event.emit(TOPIC_BACKEND_EVENT, "one")
    worker.event.emit("other-topic", "two")
    unlisten()
    unlisten()
    worker.event.emit(TOPIC_BACKEND_EVENT, "three")

    assert received == ["one"]


def test_worker_reports_unavailable_for_unbindable_port(qapp):
    worker = BridgeWorker(config=ConsoleConfig(udp_host="127.0.0.1", udp_port=70000, tcp_port=0))
    states = _record(worker.state)
    errors = _record(worker.error)

    worker.start()
    try:
        assert states == ["unavailable"]
        assert not worker.connected
        assert errors and errors[0].startswith("Bridge bind failed")
    finally:
        worker.stop()


def test_unbindable_port_falls_back_to_degraded_session(session):
    # Same wiring as the main window: first bind failure -> degraded mode.
    worker = BridgeWorker(config=ConsoleConfig(udp_host="127.0.0.1", udp_port=70000, tcp_port=0))
    worker.state.connect(
        lambda state: session.transport_unavailable("bind failed") if state == "unavailable" else None
    )
    session.subscribe(worker)
    worker.start()
    try:
        assert session.degraded
        assert [e.message for e in session.logs] == [DEGRADED_MESSAGE]
    finally:
        worker.stop()
