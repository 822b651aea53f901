import logging
from pathlib import Path
from typing import Any, Optional

from PySide6 import QtCore, QtGui

logger = logging.getLogger("missionhub.video")

BUS_POLL_MS = 50


def _gst() -> Any:
    # gi.repository.Gst, imported on first use so the console runs without it
    try:
        import gi  # type: ignore

        gi.require_version("Gst", "1.0")
        gi.require_version("GstApp", "1.0")
        from gi.repository import Gst  # type: ignore
    except ModuleNotFoundError as exc:
        if exc.name != "gi":
            raise
        raise RuntimeError(
            "Missing GStreamer GI bindings. Install OS packages for Python GI + GStreamer "
            "(e.g. python3-gi/python-gobject and gstreamer plugins)."
        ) from exc

    if not Gst.is_initialized():
        Gst.init(None)
    return Gst


# ---------------------------------------- #


def preview_pipeline_str(source: str) -> str:
    """
    Preview pipeline for a camera device (/dev/videoN) or a media file/URI.

    Frames end in an RGB appsink named "appsink".
    """
    if source.startswith("/dev/"):
        head = f"v4l2src device={source} do-timestamp=true"
    else:
        uri = source if "://" in source else Path(source).resolve().as_uri()
        head = f"uridecodebin uri={uri}"
    return (
        f"{head} ! videoconvert ! videoscale ! video/x-raw,format=RGB ! "
        "appsink name=appsink emit-signals=true max-buffers=1 drop=true sync=true"
    )


def sample_to_image(Gst: Any, sample: Any) -> Optional[QtGui.QImage]:
    """Deep-copied RGB888 QImage for one appsink sample, or None if unmappable."""
    structure = sample.get_caps().get_structure(0)
    width = structure.get_value("width")
    height = structure.get_value("height")

    buf = sample.get_buffer()
    ok, mapinfo = buf.map(Gst.MapFlags.READ)
    if not ok:
        return None
    try:
        # copy() detaches the image from the buffer before it is unmapped
        return QtGui.QImage(
            bytes(mapinfo.data), width, height, width * 3, QtGui.QImage.Format.Format_RGB888
        ).copy()
    finally:
        buf.unmap(mapinfo)


# ---------------------------------------- #


class VideoFeed(QtCore.QObject):
    """
    Plays the configured video source and hands frames to the HUD.

    With no source configured the feed stays idle and the HUD shows its
    NO VIDEO placeholder. File sources loop at end of stream.
    """

    frame_ready = QtCore.Signal(QtGui.QImage)
    error = QtCore.Signal(str)
    info = QtCore.Signal(str)

    def __init__(self, source: Optional[str] = None, parent=None):
        super().__init__(parent)
        self._source = source
        self._pipeline: Any = None
        self._description = ""

        self._bus_timer = QtCore.QTimer(self)
        self._bus_timer.setInterval(BUS_POLL_MS)
        self._bus_timer.timeout.connect(self._poll_bus)

    # ---------------------------------------- #

    @property
    def source(self) -> Optional[str]:
        return self._source

    @property
    def description(self) -> str:
        return self._description

    @property
    def playing(self) -> bool:
        return self._pipeline is not None

    # ---------------------------------------- #

    def start_preview(self) -> None:
        self.stop()
        if not self._source:
            self.info.emit("No video source configured.")
            return

        description = preview_pipeline_str(self._source)
        try:
            self._play(description)
        except (RuntimeError, ValueError) as e:
            # GLib.Error subclasses RuntimeError
            self.stop()
            self.error.emit(f"Failed to start video from {self._source}: {e}\n{description}")

    def stop(self) -> None:
        self._bus_timer.stop()
        pipeline, self._pipeline = self._pipeline, None
        self._description = ""
        if pipeline is None:
            return
        try:
            pipeline.set_state(_gst().State.NULL)
        except RuntimeError as e:
            logger.debug("Ignoring error while stopping video: %s", e)

    # ---------------------------------------- #

    def _play(self, description: str) -> None:
        Gst = _gst()
        pipeline = Gst.parse_launch(description)
        self._pipeline = pipeline
        self._description = description

        sink = pipeline.get_by_name("appsink")
        if sink is None:
            raise RuntimeError("pipeline has no appsink")
        sink.connect("new-sample", self._on_new_sample)

        if pipeline.set_state(Gst.State.PLAYING) == Gst.StateChangeReturn.FAILURE:
            raise RuntimeError("pipeline refused to enter PLAYING")

        self._bus_timer.start()
        self.info.emit(f"Video started: {self._source}")

    # ---------------------------------------- #

    def _poll_bus(self) -> None:
        if self._pipeline is None:
            return
        bus = self._pipeline.get_bus()
        msg = bus.pop()
        while msg is not None and self._pipeline is not None:
            self._on_bus_message(msg)
            msg = bus.pop()

    def _on_bus_message(self, msg: Any) -> None:
        Gst = _gst()
        if msg.type == Gst.MessageType.ERROR:
            err, dbg = msg.parse_error()
            self.stop()
            self.error.emit(f"GStreamer error: {err.message}\n{dbg or ''}")
        elif msg.type == Gst.MessageType.EOS:
            self._pipeline.seek_simple(
                Gst.Format.TIME, Gst.SeekFlags.FLUSH | Gst.SeekFlags.KEY_UNIT, 0
            )
        elif msg.type == Gst.MessageType.WARNING:
            warn, dbg = msg.parse_warning()
            logger.warning("GStreamer warning: %s %s", warn.message, dbg or "")

    # ---------------------------------------- #

    def _on_new_sample(self, sink: Any) -> Any:
        # Streaming thread: only the queued frame_ready signal crosses into Qt.
        Gst = _gst()
        sample = sink.emit("pull-sample")
        image = None if sample is None else sample_to_image(Gst, sample)
        if image is None:
            return Gst.FlowReturn.ERROR
        self.frame_ready.emit(image)
        return Gst.FlowReturn.OK
