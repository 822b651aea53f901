"""
Tests for the bounded, self-expiring log queue.
"""

import pytest

from missionhub.logs.queue import BoundedLogQueue, new_log_entry
from missionhub.telemetry.events import SEVERITY_INFO, SEVERITY_WARN


def _push_n(queue: BoundedLogQueue, n: int):
    return [queue.push(new_log_entry(f"message {i}")) for i in range(n)]


def test_new_log_entry_defaults():
    entry = new_log_entry("hello", created_at=0)
    assert entry.severity == SEVERITY_INFO
    assert entry.timestamp == "00:00:00"
    assert len(entry.id) == 32
    assert new_log_entry("hello").id != entry.id


def test_new_log_entry_keeps_given_timestamp():
    assert new_log_entry("x", timestamp="09:15:00").timestamp == "09:15:00"


def test_rejects_bad_arguments(scheduler):
    with pytest.raises(ValueError):
        BoundedLogQueue(scheduler, capacity=0)
    with pytest.raises(ValueError):
        BoundedLogQueue(scheduler, ttl_s=0)


# ---------------------------------------- #


def test_capacity_evicts_oldest_first(log_queue, scheduler):
    pushed = _push_n(log_queue, 7)

    assert len(log_queue) == 5
    assert [e.message for e in log_queue.entries] == [f"message {i}" for i in range(2, 7)]
    assert pushed[0].id not in log_queue
    assert pushed[1].id not in log_queue


def test_evicted_entries_have_their_timer_cancelled(log_queue, scheduler):
    _push_n(log_queue, 6)
    assert scheduler.handles[0].cancelled
    assert len(scheduler.pending) == 5


def test_entries_expire_after_ttl(log_queue, scheduler):
    first = log_queue.push(new_log_entry("first"))
    scheduler.advance(3.0)
    second = log_queue.push(new_log_entry("second"))

    scheduler.advance(4.9)
    assert first.id in log_queue

    scheduler.advance(0.2)
    assert first.id not in log_queue
    assert second.id in log_queue

    scheduler.advance(3.0)
    assert len(log_queue) == 0


def test_dismiss_cancels_timer(log_queue, scheduler):
    entry = log_queue.push(new_log_entry("x"))

    assert log_queue.dismiss(entry.id) is True
    assert entry.id not in log_queue
    assert scheduler.handles[0].cancelled

    # A late expiry for a dismissed entry is a no-op.
    assert log_queue.expire(entry.id) is False
    assert log_queue.dismiss(entry.id) is False


def test_dismiss_unknown_id(log_queue):
    assert log_queue.dismiss("does-not-exist") is False


def test_clear_cancels_everything(log_queue, scheduler):
    _push_n(log_queue, 3)
    log_queue.clear()

    assert len(log_queue) == 0
    assert scheduler.pending == []


def test_listener_sees_every_change(scheduler):
    seen = []
    queue = BoundedLogQueue(scheduler, capacity=2, listener=seen.append)

    a = queue.push(new_log_entry("a"))
    queue.push(new_log_entry("b"))
    queue.dismiss(a.id)
    scheduler.advance(8.0)

    assert [[e.message for e in entries] for entries in seen] == [["a"], ["a", "b"], ["b"], []]


def test_consecutive_duplicates_are_suppressed(log_queue):
    assert log_queue.push(new_log_entry("same")) is not None
    assert log_queue.push(new_log_entry("same")) is None
    assert log_queue.push(new_log_entry("same", SEVERITY_WARN)) is not None
    assert log_queue.push(new_log_entry("other")) is not None
    assert log_queue.push(new_log_entry("same")) is not None
    assert len(log_queue) == 4


def test_duplicates_allowed_when_dedupe_disabled(scheduler):
    queue = BoundedLogQueue(scheduler, dedupe=False)
    queue.push(new_log_entry("same"))
    queue.push(new_log_entry("same"))
    assert len(queue) == 2
