from datetime import datetime

from PySide6 import QtCore, QtGui, QtWidgets

from missionhub.telemetry import display
from missionhub.telemetry.types import TelemetrySnapshot


class HudVideoWidget(QtWidgets.QWidget):
    """Video frame with the telemetry overlay painted on top."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self._image: QtGui.QImage | None = None
        self._telemetry: TelemetrySnapshot | None = None

        self.setMinimumSize(800, 450)
        self.setAutoFillBackground(True)

    def set_frame(self, img: QtGui.QImage) -> None:
        self._image = img
        self.update()

    def set_telemetry(self, t: TelemetrySnapshot) -> None:
        self._telemetry = t
        self.update()

    def paintEvent(self, e: QtGui.QPaintEvent) -> None:
        p = QtGui.QPainter(self)
        p.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing, True)

        # Background
        p.fillRect(self.rect(), QtGui.QColor("#0b0f14"))

        img_rect = self.rect().adjusted(10, 10, -10, -10)
        if self._image is None:
            p.setPen(QtGui.QColor("#8aa2b2"))
            p.drawText(self.rect(), QtCore.Qt.AlignmentFlag.AlignCenter, "NO VIDEO")
        else:
            pix = QtGui.QPixmap.fromImage(self._image)
            scaled = pix.scaled(
                img_rect.size(),
                QtCore.Qt.AspectRatioMode.KeepAspectRatio,
                QtCore.Qt.TransformationMode.SmoothTransformation,
            )
            x = img_rect.x() + (img_rect.width() - scaled.width()) // 2
            y = img_rect.y() + (img_rect.height() - scaled.height()) // 2
            img_rect = QtCore.QRect(x, y, scaled.width(), scaled.height())
            p.drawPixmap(img_rect, scaled)

        # HUD overlay clipped to video area
        p.save()
        p.setClipRect(img_rect)

        green = QtGui.QColor("#2fe37a")

        # Crosshair
        c = img_rect.center()
        p.setPen(QtGui.QPen(green, 2))
        p.drawLine(c.x() - 30, c.y(), c.x() + 30, c.y())
        p.drawLine(c.x(), c.y() - 30, c.x(), c.y() + 30)
        p.drawEllipse(c, 18, 18)

        ts = datetime.now().strftime("%H:%M:%S")
        hud_text(
            p, img_rect.left() + 14, img_rect.top() + 24, f"T+ {ts}", color="#c8d2dc"
        )

        if self._telemetry:
            paint_telemetry_block(p, img_rect, self._telemetry)

        p.restore()


# ---------------------------------------- #


def hud_text(
    p: QtGui.QPainter,
    x: int,
    y: int,
    text: str,
    color: str,
    box: bool = False,
) -> None:
    font = QtGui.QFont()
    font.setPointSize(11)
    font.setBold(True)
    p.setFont(font)

    fm = QtGui.QFontMetrics(font)
    w = fm.horizontalAdvance(text)
    h = fm.height()

    if box:
        r = QtCore.QRect(x - 6, y - h + 4, w + 12, h + 6)
        p.fillRect(r, QtGui.QColor(0, 0, 0, 120))
        p.setPen(QtGui.QPen(QtGui.QColor("#1b2a34"), 1))
        p.drawRect(r)

    p.setPen(QtGui.QColor(color))
    p.drawText(x, y, text)


def _fmt(value: object, spec: str) -> str:
    try:
        return format(value, spec)
    except (TypeError, ValueError):
        return str(value)


# ---------------------------------------- #


def paint_telemetry_block(
    p: QtGui.QPainter, area: QtCore.QRect, t: TelemetrySnapshot
) -> None:
    """Key metrics in the bottom-left corner of `area`, status top-right."""
    gps_color = "#2fe37a" if t.gps_fix else display.RED
    err_color = display.RED if t.errors_count else "#2fe37a"
    lines = [
        (f"ALT {_fmt(t.altitude, '8.1f')} m", "#2fe37a"),
        (f"SPD {_fmt(t.speed, '8.1f')} m/s", "#2fe37a"),
        (f"BAT {_fmt(t.battery, '8.0f')} %", display.battery_color(t.battery)),
        (f"HDG {_fmt(t.heading, '6.0f')}° {display.cardinal_direction(t.heading)}", "#2fe37a"),
        (f"GPS {'FIX' if t.gps_fix else 'NO FIX':>8}", gps_color),
        (f"ERR {_fmt(t.errors_count, '>8')}", err_color),
    ]
    y0 = area.bottom() - 18 - 22 * (len(lines) - 1)
    for i, (line, color) in enumerate(lines):
        hud_text(p, area.left() + 14, y0 + 22 * i, line, color=color, box=True)

    # Battery bar under the status chip
    bar = QtCore.QRect(area.right() - 134, area.top() + 36, 120, 6)
    p.fillRect(bar, QtGui.QColor(0, 0, 0, 120))
    fill = QtCore.QRect(bar)
    fill.setWidth(int(bar.width() * display.battery_bar_fraction(t.battery)))
    p.fillRect(fill, QtGui.QColor(display.battery_color(t.battery)))

    hud_text(
        p,
        area.right() - 134,
        area.top() + 24,
        str(t.status),
        color=display.status_color(t.status),
        box=True,
    )
