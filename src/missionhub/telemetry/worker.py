import time
from typing import Callable

from PySide6 import QtCore

from missionhub.telemetry.reader import BackendBridge
from missionhub.util.config import ConsoleConfig


class BridgeWorker(QtCore.QObject):
    """
    Polls the UDP/TCP bridge from the Qt event loop and re-emits its events.

    `event` carries (topic, raw JSON payload). When the sockets cannot be
    bound the worker reports state "unavailable" and retries every
    `reconnect_interval_s` from tick().
    """

    event = QtCore.Signal(str, str)
    state = QtCore.Signal(str)
    error = QtCore.Signal(str)
    info = QtCore.Signal(str)

    # ---------------------------------------- #

    def __init__(self, config: ConsoleConfig | None = None, parent=None):
        super().__init__(parent)

        self._config = config or ConsoleConfig()
        self._reconnect_interval_s = self._config.reconnect_interval_s

        self._bridge: BackendBridge | None = None
        self._running = False
        self._next_connect_attempt_time: float = 0.0
        self._connect_attempts: int = 0

        self._timer = QtCore.QTimer(self)
        self._timer.setInterval(self._config.poll_interval_ms)
        self._timer.timeout.connect(self.tick)

    # ---------------------------------------- #

    @property
    def running(self) -> bool:
        return self._running

    @property
    def connected(self) -> bool:
        return self._bridge is not None

    # ---------------------------------------- #

    def listen(self, topic: str, handler: Callable[[str], None]) -> Callable[[], None]:
        """Subscribe `handler` to payloads on `topic`; returns the unsubscribe call."""

        def on_event(event_topic: str, payload: str) -> None:
            if event_topic == topic:
                handler(payload)

        self.event.connect(on_event)

        def unlisten() -> None:
            try:
                self.event.disconnect(on_event)
            except (RuntimeError, TypeError):
                # Already disconnected or the worker is gone.
                pass

        return unlisten

    # ---------------------------------------- #

    def _disconnect(self, reason: str) -> None:
        if self._bridge is not None:
            try:
                self._bridge.close()
            except OSError:
                pass
        self._bridge = None
        self._next_connect_attempt_time = time.time() + self._reconnect_interval_s
        self.state.emit(f"reconnecting:{self._connect_attempts}")
        self.error.emit(reason)

    # ---------------------------------------- #

    def _maybe_connect(self) -> None:
        if self._bridge is not None:
            return

        now = time.time()
        if now < self._next_connect_attempt_time:
            return

        cfg = self._config
        try:
            self._bridge = BackendBridge(
                udp_host=cfg.udp_host,
                udp_port=cfg.udp_port,
                tcp_host=cfg.tcp_host,
                tcp_port=cfg.tcp_port,
            )
            self._connect_attempts = 0
            self.state.emit("connected")
            self.info.emit(
                f"Bridge listening on udp:{cfg.udp_port} tcp:{cfg.tcp_port}"
            )
        except (OSError, OverflowError) as e:
            self._bridge = None
            self._connect_attempts += 1
            self._next_connect_attempt_time = now + self._reconnect_interval_s
            if self._connect_attempts == 1:
                self.state.emit("unavailable")
            else:
                self.state.emit(f"reconnecting:{self._connect_attempts}")
            self.error.emit(f"Bridge bind failed: {e}")

    # ---------------------------------------- #

    @QtCore.Slot()
    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._connect_attempts = 0
        self._next_connect_attempt_time = 0.0
        self._maybe_connect()
        self._timer.start()

    # ---------------------------------------- #

    @QtCore.Slot()
    def stop(self) -> None:
        self._timer.stop()
        self._running = False
        if self._bridge is not None:
            self._bridge.close()
        self._bridge = None
        self._connect_attempts = 0
        self.state.emit("disconnected")

    # ---------------------------------------- #

    @QtCore.Slot()
    def tick(self) -> None:
        if not self._running:
            return

        if self._bridge is None:
            self._maybe_connect()
            return

        try:
            events = self._bridge.read_events()
        except OSError as e:
            self._disconnect(f"Bridge read error: {e}")
            return

        for topic, payload in events:
            self.event.emit(topic, payload)
