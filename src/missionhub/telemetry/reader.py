import json
import logging
import socket
from collections import deque

from missionhub.telemetry import protocol

logger = logging.getLogger("missionhub.bridge")

_MAX_DATAGRAM = 65535
_MAX_CHUNK = 4096
MAX_LINE_BYTES = 64 * 1024


class _PayloadClient:
    def __init__(self, sock: socket.socket, sender: str) -> None:
        self.sock = sock
        self.sender = sender
        self.rx_buf = bytearray()
        # Set while skipping the rest of an over-long line.
        self.discarding = False


class BackendBridge:
    """
    Turns vehicle UDP telemetry and payload TCP traffic into backend events.

    Every inbound message becomes a (topic, JSON envelope) pair queued for
    read_events(). Sockets are non-blocking; poll from an event-loop timer.
    """

    def __init__(
        self,
        udp_host: str = "0.0.0.0",
        udp_port: int = 14550,
        tcp_host: str = "0.0.0.0",
        tcp_port: int = 9001,
    ) -> None:
        self._udp: socket.socket | None = None
        self._tcp: socket.socket | None = None
        self._clients: dict[int, _PayloadClient] = {}
        self._pending: deque[tuple[str, str]] = deque()

        try:
            self._udp = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            self._udp.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._udp.bind((udp_host, udp_port))
            self._udp.setblocking(False)

            self._tcp = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            self._tcp.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._tcp.bind((tcp_host, tcp_port))
            self._tcp.listen()
            self._tcp.setblocking(False)
        except (OSError, OverflowError):
            # OverflowError: port outside 0-65535
            self.close()
            raise

        logger.info(
            "Bridge listening: udp %s:%d, tcp %s:%d",
            udp_host,
            self.udp_address[1],
            tcp_host,
            self.tcp_address[1],
        )

    # ---------------------------------------- #
    #  Connection                              #
    # ---------------------------------------- #

    @property
    def udp_address(self) -> tuple[str, int]:
        assert self._udp is not None
        return self._udp.getsockname()

    @property
    def tcp_address(self) -> tuple[str, int]:
        assert self._tcp is not None
        return self._tcp.getsockname()

    def close(self) -> None:
        for client in self._clients.values():
            client.sock.close()
        self._clients.clear()
        if self._udp is not None:
            self._udp.close()
            self._udp = None
        if self._tcp is not None:
            self._tcp.close()
            self._tcp = None

    # ---------------------------------------- #

    def read_events(self) -> list[tuple[str, str]]:
        """Drain everything readable right now and return the new events."""
        self._drain_datagrams()
        self._accept_clients()
        self._drain_clients()

        events = list(self._pending)
        self._pending.clear()
        return events

    # ---------------------------------------- #

    def _drain_datagrams(self) -> None:
        if self._udp is None:
            return
        while True:
            try:
                data, _addr = self._udp.recvfrom(_MAX_DATAGRAM)
            except (BlockingIOError, InterruptedError):
                return
            except OSError as exc:
                logger.debug("UDP receive error: %s", exc)
                return

            try:
                packet = json.loads(data.decode("utf-8"))
            except (UnicodeDecodeError, ValueError, RecursionError):
                # Not one of ours; ignore and keep draining.
                logger.debug("Ignoring non-JSON datagram (%d bytes)", len(data))
                continue
            if not isinstance(packet, dict):
                continue

            envelope = protocol.telemetry_envelope(packet)
            if envelope is None:
                logger.debug("Ignoring datagram without packet_type")
                continue
            self._pending.append((protocol.TOPIC_BACKEND_EVENT, envelope))

    # ---------------------------------------- #

    def _accept_clients(self) -> None:
        if self._tcp is None:
            return
        while True:
            try:
                sock, addr = self._tcp.accept()
            except (BlockingIOError, InterruptedError):
                return
            sock.setblocking(False)
            sender = f"{addr[0]}:{addr[1]}"
            self._clients[sock.fileno()] = _PayloadClient(sock, sender)
            logger.debug("Payload connection from %s", sender)

    # ---------------------------------------- #

    def _drain_clients(self) -> None:
        for key, client in list(self._clients.items()):
            closed = False
            got_data = False
            while True:
                try:
                    chunk = client.sock.recv(_MAX_CHUNK)
                except (BlockingIOError, InterruptedError):
                    break
                except OSError as exc:
                    logger.debug("Payload read error from %s: %s", client.sender, exc)
                    closed = True
                    break
                if not chunk:
                    closed = True
                    break
                got_data = True
                client.rx_buf.extend(chunk)
                self._drain_lines(client, flush=False)

            self._drain_lines(client, flush=closed)

            if got_data and not closed:
                try:
                    client.sock.sendall(b"ACK\n")
                except OSError:
                    closed = True
                    self._drain_lines(client, flush=True)

            if closed:
                client.sock.close()
                del self._clients[key]

    # ---------------------------------------- #

    def _drain_lines(self, client: _PayloadClient, flush: bool) -> None:
        while True:
            try:
                idx = client.rx_buf.index(b"\n")
            except ValueError:
                break
            line = bytes(client.rx_buf[:idx])
            del client.rx_buf[: idx + 1]
            if client.discarding or idx > MAX_LINE_BYTES:
                client.discarding = False
                logger.debug("Dropped over-long line from %s", client.sender)
                continue
            self._queue_commands(client, line)

        if len(client.rx_buf) > MAX_LINE_BYTES:
            logger.debug(
                "Dropping %d buffered bytes from %s: no newline within %d bytes",
                len(client.rx_buf),
                client.sender,
                MAX_LINE_BYTES,
            )
            client.rx_buf.clear()
            client.discarding = True

        # Senders commonly write one JSON object and hang up without a newline.
        if flush and client.rx_buf and not client.discarding:
            line = bytes(client.rx_buf)
            client.rx_buf.clear()
            self._queue_commands(client, line)

    def _queue_commands(self, client: _PayloadClient, line: bytes) -> None:
        text = line.decode("utf-8", errors="replace")
        for command in protocol.split_commands(text):
            self._pending.append(
                (
                    protocol.TOPIC_BACKEND_EVENT,
                    protocol.payload_envelope(command, client.sender),
                )
            )
