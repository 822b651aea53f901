"""
Tests for the toast column that mirrors the visible log entries.
"""

import pytest

pytest.importorskip("PySide6.QtWidgets")

from missionhub.logs.queue import new_log_entry  # noqa: E402
from missionhub.ui.toast import EXIT_ANIMATION_MS, LogToast, ToastColumn  # noqa: E402


def _finish_fade(toast: LogToast) -> None:
    toast._fade.setCurrentTime(EXIT_ANIMATION_MS)


@pytest.fixture
def column(qapp):
    c = ToastColumn()
    dismissed: list[str] = []
    c.dismiss_requested.connect(lambda entry_id: dismissed.append(entry_id))
    c.dismissed = dismissed
    yield c
    c.deleteLater()


def test_new_entries_get_toasts(column):
    a, b = new_log_entry("a"), new_log_entry("b")
    column.set_entries((a, b))
    toasts = column.findChildren(LogToast)
    assert sorted(t.entry.message for t in toasts) == ["a", "b"]


def test_expired_entry_fades_before_removal(column):
    entry = new_log_entry("expiring")
    column.set_entries((entry,))
    (toast,) = column.findChildren(LogToast)

    column.set_entries(())

    assert toast.retiring
    assert toast.exiting
    _finish_fade(toast)
    # The queue already dropped it; no dismissal round-trip.
    assert column.dismissed == []


def test_clicked_toast_requests_dismissal_after_fade(column):
    entry = new_log_entry("click me")
    column.set_entries((entry,))
    (toast,) = column.findChildren(LogToast)

    toast.begin_exit()
    assert column.dismissed == []
    _finish_fade(toast)
    assert column.dismissed == [entry.id]

    # The queue then drops the entry; the already-faded toast is just deleted.
    column.set_entries(())
    assert toast.retiring
    assert column.dismissed == [entry.id]
