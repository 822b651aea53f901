import math
from collections import deque

from PySide6 import QtCore, QtGui, QtWidgets

from missionhub.telemetry.types import Position, TelemetrySnapshot
from missionhub.ui.hud import hud_text, paint_telemetry_block

_EARTH_RADIUS_M = 6_371_000.0


class MapPlotWidget(QtWidgets.QWidget):
    """
    Vehicle-centred plot: range rings, recent track and a heading marker.

    No map tiles; distances are local-tangent-plane meters around the
    current position.
    """

    def __init__(self, position: Position, parent=None):
        super().__init__(parent)
        self._position = position
        self._telemetry: TelemetrySnapshot | None = None
        self._track: deque[Position] = deque([position], maxlen=600)
        self._meters_per_px = 1.0

        self.setMinimumSize(800, 450)

    def set_position(self, position: Position) -> None:
        self._position = position
        self._track.append(position)
        self.update()

    def set_telemetry(self, t: TelemetrySnapshot) -> None:
        self._telemetry = t
        self.update()

    def zoom(self, factor: float) -> None:
        self._meters_per_px = min(50.0, max(0.05, self._meters_per_px / factor))
        self.update()

    def wheelEvent(self, e: QtGui.QWheelEvent) -> None:
        self.zoom(1.25 if e.angleDelta().y() > 0 else 0.8)

    # ---------------------------------------- #

    def _to_px(self, p: Position, center: QtCore.QPointF) -> QtCore.QPointF:
        lat0 = math.radians(self._position.lat)
        dx = math.radians(p.lon - self._position.lon) * math.cos(lat0) * _EARTH_RADIUS_M
        dy = math.radians(p.lat - self._position.lat) * _EARTH_RADIUS_M
        return QtCore.QPointF(
            center.x() + dx / self._meters_per_px, center.y() - dy / self._meters_per_px
        )

    def paintEvent(self, e: QtGui.QPaintEvent) -> None:
        p = QtGui.QPainter(self)
        p.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing, True)
        p.fillRect(self.rect(), QtGui.QColor("#0b0f14"))

        area = self.rect().adjusted(10, 10, -10, -10)
        center = QtCore.QPointF(area.center())

        # Range rings every 50 m
        ring_pen = QtGui.QPen(QtGui.QColor("#1b2a34"), 1)
        p.setPen(ring_pen)
        for i in range(1, 6):
            r = 50.0 * i / self._meters_per_px
            p.drawEllipse(center, r, r)

        # Track
        if len(self._track) > 1:
            path = QtGui.QPainterPath(self._to_px(self._track[0], center))
            for pos in list(self._track)[1:]:
                path.lineTo(self._to_px(pos, center))
            p.setPen(QtGui.QPen(QtGui.QColor("#7AA2FF"), 2))
            p.drawPath(path)

        # Vehicle marker, rotated to heading
        heading = 0.0
        if self._telemetry is not None:
            try:
                heading = float(self._telemetry.heading)
            except (TypeError, ValueError):
                heading = 0.0
        p.save()
        p.translate(center)
        p.rotate(heading)
        marker = QtGui.QPolygonF(
            [QtCore.QPointF(0, -16), QtCore.QPointF(10, 12), QtCore.QPointF(0, 6), QtCore.QPointF(-10, 12)]
        )
        p.setPen(QtGui.QPen(QtGui.QColor("#ffffff"), 2))
        p.setBrush(QtGui.QColor("#2196F3"))
        p.drawPolygon(marker)
        p.restore()

        hud_text(
            p,
            area.left() + 14,
            area.top() + 24,
            f"{self._position.lat:.6f}, {self._position.lon:.6f}",
            color="#c8d2dc",
            box=True,
        )
        hud_text(
            p,
            area.left() + 14,
            area.top() + 50,
            f"{self._meters_per_px * 100:.0f} m / 100 px",
            color="#9AA6B2",
        )

        if self._telemetry is not None:
            paint_telemetry_block(p, area, self._telemetry)
