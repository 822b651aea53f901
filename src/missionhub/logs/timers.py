from __future__ import annotations

from typing import Callable

from PySide6 import QtCore


class QtTimerHandle:
    def __init__(self, timer: QtCore.QTimer) -> None:
        self._timer: QtCore.QTimer | None = timer

    @property
    def active(self) -> bool:
        return self._timer is not None

    def cancel(self) -> None:
        timer = self._timer
        if timer is None:
            return
        self._timer = None
        timer.stop()
        timer.deleteLater()

    def _fired(self) -> None:
        timer = self._timer
        self._timer = None
        if timer is not None:
            timer.deleteLater()


# ---------------------------------------- #


class QtScheduler:
    """
    Single-shot callbacks on the Qt event loop.

    Callbacks run on the thread owning `parent`, interleaved with (never
    concurrent to) signal delivery, so the log queue needs no locking.
    """

    def __init__(self, parent: QtCore.QObject | None = None) -> None:
        self._parent = parent

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> QtTimerHandle:
        timer = QtCore.QTimer(self._parent)
        timer.setSingleShot(True)
        timer.setInterval(max(0, int(round(delay_s * 1000.0))))

        handle = QtTimerHandle(timer)

        def on_timeout() -> None:
            handle._fired()
            callback()

        timer.timeout.connect(on_timeout)
        timer.start()
        return handle
