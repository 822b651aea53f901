from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Final, Protocol

from missionhub.telemetry.events import SEVERITY_INFO
from missionhub.util.time import format_timestamp, now_unix

logger = logging.getLogger("missionhub.logs")

DEFAULT_CAPACITY: Final[int] = 5
DEFAULT_TTL_S: Final[float] = 8.0

STATE_VISIBLE: Final[str] = "VISIBLE"
STATE_REMOVED: Final[str] = "REMOVED"


@dataclass(frozen=True)
class LogEntry:
    id: str
    message: str
    severity: str
    created_at: float
    timestamp: str


# ---------------------------------------- #


def new_log_entry(
    message: str,
    severity: str = SEVERITY_INFO,
    timestamp: str | None = None,
    created_at: float | None = None,
) -> LogEntry:
    t = now_unix() if created_at is None else created_at
    return LogEntry(
        id=uuid.uuid4().hex,
        message=message,
        severity=severity,
        created_at=t,
        timestamp=timestamp or format_timestamp(t),
    )


# ---------------------------------------- #


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle: ...


# ---------------------------------------- #


class _Slot:
    __slots__ = ("entry", "handle", "state")

    def __init__(self, entry: LogEntry) -> None:
        self.entry = entry
        self.handle: TimerHandle | None = None
        self.state = STATE_VISIBLE

    def remove(self) -> None:
        if self.handle is not None:
            self.handle.cancel()
            self.handle = None
        self.state = STATE_REMOVED


# ---------------------------------------- #


class BoundedLogQueue:
    """
    Insertion-ordered feed of at most `capacity` log entries.

    Each pushed entry gets its own expiry callback `ttl_s` after it was
    pushed. Entries pushed out by capacity are dropped without expiring, and
    dismissing an entry cancels its pending callback. Consecutive duplicates
    (same message and severity as the newest visible entry) are suppressed.

    `listener` is called with the visible entries after every change.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        capacity: int = DEFAULT_CAPACITY,
        ttl_s: float = DEFAULT_TTL_S,
        listener: Callable[[tuple[LogEntry, ...]], None] | None = None,
        dedupe: bool = True,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        if ttl_s <= 0:
            raise ValueError("ttl_s must be positive")

        self._scheduler = scheduler
        self._capacity = capacity
        self._ttl_s = ttl_s
        self._listener = listener
        self._dedupe = dedupe
        self._slots: OrderedDict[str, _Slot] = OrderedDict()

    # ---------------------------------------- #

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def ttl_s(self) -> float:
        return self._ttl_s

    @property
    def entries(self) -> tuple[LogEntry, ...]:
        return tuple(slot.entry for slot in self._slots.values())

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._slots

    def set_listener(self, listener: Callable[[tuple[LogEntry, ...]], None] | None) -> None:
        self._listener = listener

    # ---------------------------------------- #

    def push(self, entry: LogEntry) -> LogEntry | None:
        if self._dedupe and self._slots:
            newest = next(reversed(self._slots.values())).entry
            if newest.message == entry.message and newest.severity == entry.severity:
                logger.debug("Suppressed duplicate log entry: %s", entry.message)
                return None

        slot = _Slot(entry)
        self._slots[entry.id] = slot

        while len(self._slots) > self._capacity:
            _, oldest = self._slots.popitem(last=False)
            oldest.remove()

        entry_id = entry.id
        slot.handle = self._scheduler.call_later(
            self._ttl_s, lambda: self.expire(entry_id)
        )
        self._notify()
        return entry

    # ---------------------------------------- #

    def expire(self, entry_id: str) -> bool:
        return self._remove(entry_id)

    def dismiss(self, entry_id: str) -> bool:
        return self._remove(entry_id)

    # ---------------------------------------- #

    def clear(self) -> None:
        """Drop every entry and cancel all pending expiry callbacks."""
        if not self._slots:
            return
        for slot in self._slots.values():
            slot.remove()
        self._slots.clear()
        self._notify()

    # ---------------------------------------- #

    def _remove(self, entry_id: str) -> bool:
        slot = self._slots.pop(entry_id, None)
        if slot is None:
            return False
        slot.remove()
        self._notify()
        return True

    def _notify(self) -> None:
        if self._listener is not None:
            self._listener(self.entries)
