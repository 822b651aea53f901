from PySide6 import QtCore, QtWidgets

from missionhub.logs.queue import LogEntry
from missionhub.telemetry import display

EXIT_ANIMATION_MS = 300


class LogToast(QtWidgets.QFrame):
    """
    One log entry. Clicking it (or its x button) fades it out for
    EXIT_ANIMATION_MS before asking for the entry to be dismissed. Entries
    that leave the queue on their own (expiry, eviction) fade the same way
    via retire().
    """

    dismiss_requested = QtCore.Signal(str)

    def __init__(self, entry: LogEntry, parent=None):
        super().__init__(parent)
        self.entry = entry
        self._exiting = False
        self._faded = False
        # Entry already gone from the queue; delete after fading.
        self._retiring = False

        self.setObjectName("Toast")
        self.setProperty("severity", entry.severity)
        self.setCursor(QtCore.Qt.CursorShape.PointingHandCursor)
        self.setFixedWidth(380)

        level = QtWidgets.QLabel(f"{display.severity_icon(entry.severity)} {entry.severity}")
        level.setObjectName("ToastLevel")
        level.setStyleSheet(f"color: {display.severity_color(entry.severity)};")

        stamp = QtWidgets.QLabel(entry.timestamp)
        stamp.setObjectName("ToastTime")

        close = QtWidgets.QToolButton()
        close.setObjectName("ToastDismiss")
        close.setText("×")
        close.clicked.connect(self.begin_exit)

        header = QtWidgets.QHBoxLayout()
        header.addWidget(level)
        header.addStretch(1)
        header.addWidget(stamp)
        header.addWidget(close)

        message = QtWidgets.QLabel(entry.message)
        message.setObjectName("ToastMessage")
        message.setWordWrap(True)

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(10, 6, 10, 8)
        layout.addLayout(header)
        layout.addWidget(message)

        self._opacity = QtWidgets.QGraphicsOpacityEffect(self)
        self._opacity.setOpacity(1.0)
        self.setGraphicsEffect(self._opacity)

        self._fade = QtCore.QPropertyAnimation(self._opacity, b"opacity", self)
        self._fade.setDuration(EXIT_ANIMATION_MS)
        self._fade.setStartValue(1.0)
        self._fade.setEndValue(0.0)
        self._fade.finished.connect(self._on_faded)

    @property
    def exiting(self) -> bool:
        return self._exiting

    @property
    def retiring(self) -> bool:
        return self._retiring

    def mousePressEvent(self, e) -> None:
        self.begin_exit()
        super().mousePressEvent(e)

    @QtCore.Slot()
    def begin_exit(self) -> None:
        if self._exiting:
            return
        self._exiting = True
        self._fade.start()

    def retire(self) -> None:
        """The entry left the queue: finish (or start) the fade, then delete."""
        self._retiring = True
        if self._faded:
            self.deleteLater()
            return
        # Mid-fade toasts pick this up in _on_faded.
        self.begin_exit()

    def _on_faded(self) -> None:
        self._faded = True
        if self._retiring:
            self.deleteLater()
        else:
            self.dismiss_requested.emit(self.entry.id)


# ---------------------------------------- #


class ToastColumn(QtWidgets.QWidget):
    """Stack of LogToasts mirroring the visible log entries, newest last."""

    dismiss_requested = QtCore.Signal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._toasts: dict[str, LogToast] = {}

        self.setAttribute(QtCore.Qt.WidgetAttribute.WA_TranslucentBackground, True)
        self._layout = QtWidgets.QVBoxLayout(self)
        self._layout.setContentsMargins(0, 0, 0, 0)
        self._layout.setSpacing(6)
        self._layout.addStretch(1)

    @QtCore.Slot(object)
    def set_entries(self, entries: tuple[LogEntry, ...]) -> None:
        wanted = {e.id for e in entries}

        for entry_id in list(self._toasts):
            if entry_id not in wanted:
                # Stays in the layout until its fade finishes.
                self._toasts.pop(entry_id).retire()

        for entry in entries:
            if entry.id in self._toasts:
                continue
            toast = LogToast(entry, self)
            toast.dismiss_requested.connect(self.dismiss_requested)
            self._toasts[entry.id] = toast
            self._layout.addWidget(toast)

        self.adjustSize()
