import logging

from PySide6 import QtCore, QtGui, QtWidgets

from missionhub.console.session import ConsoleSession
from missionhub.input.shortcuts import install_shortcuts, shortcut_help, shortcut_hint
from missionhub.telemetry.types import Position, TelemetrySnapshot
from missionhub.telemetry.worker import BridgeWorker
from missionhub.ui.hud import HudVideoWidget
from missionhub.ui.map_view import MapPlotWidget
from missionhub.ui.toast import ToastColumn
from missionhub.util.config import ConsoleConfig
from missionhub.video.gst_pipeline import VideoFeed

logger = logging.getLogger("missionhub.ui")

VIEW_MAP = "MAP"
VIEW_VIDEO = "VIDEO"


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, config: ConsoleConfig | None = None, enable_video: bool = True):
        super().__init__()
        self.setWindowTitle("Mission Control Hub")

        self._config = config or ConsoleConfig()
        self._view_mode = VIEW_MAP

        # Session owns the pipeline; the worker is its event source
        self.session = ConsoleSession(config=self._config, parent=self)
        self._worker = BridgeWorker(config=self._config, parent=self)

        # Views
        self.map_view = MapPlotWidget(self.session.position)
        self.video_view = HudVideoWidget()
        self.map_view.set_telemetry(self.session.snapshot)
        self.video_view.set_telemetry(self.session.snapshot)

        self._stack = QtWidgets.QStackedWidget()
        self._stack.addWidget(self.map_view)
        self._stack.addWidget(self.video_view)

        # Top bar: connection badge + view toggle
        self.connection_chip = QtWidgets.QLabel()
        self.btn_view = QtWidgets.QPushButton()
        self.btn_view.setToolTip(f"Toggle map / video ({shortcut_hint('toggle_view')})")
        self.btn_view.clicked.connect(self.toggle_view)

        top = QtWidgets.QWidget()
        top.setObjectName("TopBar")
        top.setToolTip(shortcut_help())
        top_row = QtWidgets.QHBoxLayout(top)
        top_row.setContentsMargins(10, 6, 10, 6)
        top_row.addWidget(self.connection_chip)
        top_row.addStretch(1)
        top_row.addWidget(self.btn_view)

        # Toasts float over the views, anchored bottom-right
        self.toasts = ToastColumn(self._stack)
        self.toasts.dismiss_requested.connect(self.session.dismiss)

        root = QtWidgets.QWidget()
        layout = QtWidgets.QVBoxLayout(root)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)
        layout.addWidget(top)
        layout.addWidget(self._stack, stretch=1)
        self.setCentralWidget(root)

        # Wiring
        self.session.telemetry_changed.connect(self.on_telemetry)
        self.session.position_changed.connect(self.on_position)
        self.session.logs_changed.connect(self.on_logs)
        self.session.connection_changed.connect(self.on_connection)
        self._worker.state.connect(self.on_worker_state)
        self._worker.error.connect(self.on_error)
        self._worker.info.connect(self.on_info)

        # Video pipeline
        self._video: VideoFeed | None = None
        if enable_video:
            self._video = VideoFeed(source=self._config.camera_device, parent=self)
            self._video.frame_ready.connect(self.video_view.set_frame)
            self._video.error.connect(self.on_error)
            self._video.info.connect(self.on_info)

        install_shortcuts(self)
        self._refresh_view_button()
        self.on_connection(self.session.pipeline.connection.status)

        # Subscribe before starting so no early event is missed
        self.session.subscribe(self._worker)
        self._worker.start()

        if self._video is not None:
            self._video.start_preview()

    # ---------------------------------------- #

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:
        try:
            self._worker.stop()
            if self._video is not None:
                self._video.stop()
        finally:
            self.session.close()
        super().closeEvent(event)

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:
        super().resizeEvent(event)
        self._place_toasts()

    # ---------------------------------------- #

    @QtCore.Slot(object)
    def on_telemetry(self, t: TelemetrySnapshot) -> None:
        self.map_view.set_telemetry(t)
        self.video_view.set_telemetry(t)

    @QtCore.Slot(object)
    def on_position(self, pos: Position) -> None:
        self.map_view.set_position(pos)

    @QtCore.Slot(object)
    def on_logs(self, entries) -> None:
        self.toasts.set_entries(entries)
        self._place_toasts()

    @QtCore.Slot(str)
    def on_connection(self, _status: str) -> None:
        if not self.session.connected:
            self.connection_chip.setObjectName("ChipNeutral")
            self.connection_chip.setText("Awaiting Connection")
        elif self.session.degraded:
            self.connection_chip.setObjectName("ChipCaution")
            self.connection_chip.setText("Mission Control Active (degraded)")
        else:
            self.connection_chip.setObjectName("ChipGood")
            self.connection_chip.setText("Mission Control Active")
        # Re-polish so the objectName selector applies
        self.connection_chip.style().unpolish(self.connection_chip)
        self.connection_chip.style().polish(self.connection_chip)

    @QtCore.Slot(str)
    def on_worker_state(self, state: str) -> None:
        logger.debug("Bridge state: %s", state)
        if state == "unavailable":
            self.session.transport_unavailable("bridge could not bind its sockets")

    @QtCore.Slot(str)
    def on_error(self, msg: str) -> None:
        # Developer-facing only; the operator never gets error dialogs.
        logger.error(msg)

    @QtCore.Slot(str)
    def on_info(self, msg: str) -> None:
        logger.info(msg)

    # ---------------------------------------- #

    def toggle_view(self) -> None:
        self._view_mode = VIEW_VIDEO if self._view_mode == VIEW_MAP else VIEW_MAP
        self._stack.setCurrentWidget(
            self.map_view if self._view_mode == VIEW_MAP else self.video_view
        )
        self._refresh_view_button()

    def dismiss_logs(self) -> None:
        self.session.dismiss_all()

    def toggle_fullscreen(self) -> None:
        if self.isFullScreen():
            self.showNormal()
        else:
            self.showFullScreen()

    # ---------------------------------------- #

    def _refresh_view_button(self) -> None:
        target = VIEW_VIDEO if self._view_mode == VIEW_MAP else VIEW_MAP
        self.btn_view.setText(f"Show {target.title()}")

    def _place_toasts(self) -> None:
        self.toasts.adjustSize()
        area = self._stack.rect()
        size = self.toasts.sizeHint()
        self.toasts.setGeometry(
            area.right() - size.width() - 16,
            area.bottom() - size.height() - 16,
            size.width(),
            size.height(),
        )
        self.toasts.raise_()
