from __future__ import annotations

import argparse
import json
import logging
import math
import random
import socket
import sys
import time
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger("missionhub.simulator")

# (packet_type, period in seconds)
PACKET_CADENCE: tuple[tuple[str, float], ...] = (
    ("HEARTBEAT", 1.0),
    ("GLOBAL_POSITION_INT", 0.2),
    ("ATTITUDE", 0.1),
    ("SYS_STATUS", 2.0),
)

PAYLOAD_EVENTS: tuple[dict[str, Any], ...] = (
    {"event": "CAMERA_INIT", "level": "INFO", "subsystem": "CAMERA", "details": "Camera system initialized successfully.", "data": {"resolution": "4K", "fps": 30}},
    {"event": "IMAGE_CAPTURED", "level": "INFO", "subsystem": "CAMERA", "details": "High-resolution image captured.", "data": {"file_size": "12.4MB", "location": "grid_A4"}},
    {"event": "THERMAL_SCAN_COMPLETE", "level": "INFO", "subsystem": "THERMAL", "details": "Thermal imaging scan completed.", "data": {"max_temp": 45.2, "min_temp": 12.8, "anomalies": 2}},
    {"event": "LIDAR_SCAN_STARTED", "level": "INFO", "subsystem": "LIDAR", "details": "LIDAR terrain mapping initiated.", "data": {"scan_area": "500x500m", "resolution": "10cm"}},
    {"event": "DATALINK_ESTABLISHED", "level": "INFO", "subsystem": "COMM", "details": "High-bandwidth data link established.", "data": {"bandwidth": "50 Mbps", "latency": "12ms"}},
    {"event": "WAYPOINT_REACHED", "level": "INFO", "subsystem": "NAV", "details": "Navigation waypoint reached.", "data": {"waypoint": "WP_07", "eta_next": "2.3 min"}},
    {"event": "MISSION_PHASE_COMPLETE", "level": "INFO", "subsystem": "MISSION", "details": "Survey phase Alpha completed.", "data": {"coverage": "87%", "images": 156}},
    {"event": "GEOFENCE_APPROACH", "level": "WARN", "subsystem": "NAV", "details": "Approaching geofence boundary.", "data": {"distance": "50m", "boundary": "NORTH_SECTOR"}},
    {"event": "LOW_STORAGE_WARNING", "level": "WARN", "subsystem": "STORAGE", "details": "Storage space below 20%.", "data": {"available": "18%", "used": "164GB"}},
    {"event": "TEMPERATURE_WARNING", "level": "WARN", "subsystem": "THERMAL", "details": "Payload temperature elevated.", "data": {"temp": "67°C", "limit": "70°C"}},
    {"event": "WEAK_GPS_SIGNAL", "level": "WARN", "subsystem": "GPS", "details": "GPS signal strength degraded.", "data": {"satellites": 6, "strength": "42%"}},
    {"event": "STORAGE_FAILURE", "level": "CRITICAL", "subsystem": "STORAGE", "details": "Primary storage device failure.", "data": {"backup_status": "ACTIVE", "data_loss": "NONE"}},
    {"event": "PAYLOAD_POWER_FAULT", "level": "CRITICAL", "subsystem": "POWER", "details": "Power supply fault detected.", "data": {"voltage": "11.2V", "expected": "12.0V"}},
    {"event": "EMERGENCY_LANDING_TRIGGER", "level": "CRITICAL", "subsystem": "SAFETY", "details": "Emergency landing protocol activated.", "data": {"reason": "PAYLOAD_FAULT", "eta": "90 seconds"}},
)

LEVEL_WEIGHTS: tuple[tuple[str, float], ...] = (
    ("CRITICAL", 0.05),
    ("WARN", 0.25),
    ("INFO", 0.70),
)


class TelemetrySimulator:
    """
    Deterministic vehicle telemetry packets for bench testing.

    The vehicle circles its home point; battery drains linearly.
    """

    def __init__(self, home_lat: float = 47.6062, home_lon: float = -122.3321) -> None:
        self.home_lat = home_lat
        self.home_lon = home_lon
        self._t0 = time.time()

    # ---------------------------------------- #

    def reset(self) -> None:
        self._t0 = time.time()

    # ---------------------------------------- #

    def packet(self, packet_type: str, t: float | None = None) -> dict[str, Any]:
        if t is None:
            t = time.time() - self._t0

        if packet_type == "HEARTBEAT":
            return {
                "packet_type": packet_type,
                "system_status": "active" if t > 5.0 else "standby",
                "mavlink_version": 2,
            }

        if packet_type == "GLOBAL_POSITION_INT":
            w = 2.0 * math.pi / 120.0
            return {
                "packet_type": packet_type,
                "lat": round(self.home_lat + 0.001 * math.sin(w * t), 6),
                "lon": round(self.home_lon + 0.001 * math.cos(w * t), 6),
                "alt": int(120 + 20 * math.sin(t / 10.0)),
                "vx": int(round(1100 * math.cos(w * t))),
                "vy": int(round(-1100 * math.sin(w * t))),
                "vz": 0,
                "heading": round(math.degrees(-w * t) % 360.0, 1),
                "gps_fix": True,
            }

        if packet_type == "ATTITUDE":
            return {
                "packet_type": packet_type,
                "roll": round(0.1 * math.sin(t), 4),
                "pitch": round(0.1 * math.cos(t), 4),
                "yaw": round((t / 10.0) % (2.0 * math.pi), 4),
            }

        if packet_type == "SYS_STATUS":
            battery = max(20.0, 95.0 - 0.05 * t)
            return {
                "packet_type": packet_type,
                "voltage_battery": int(battery * 0.42 * 100),
                "battery_remaining": int(battery),
                "errors_count": 0,
            }

        raise ValueError(f"unknown packet type: {packet_type}")


# ---------------------------------------- #


class PayloadSimulator:
    """Random subsystem events, weighted 70% INFO / 25% WARN / 5% CRITICAL."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def next_event(self) -> dict[str, Any]:
        roll = self._rng.random()
        level = LEVEL_WEIGHTS[-1][0]
        acc = 0.0
        for name, weight in LEVEL_WEIGHTS:
            acc += weight
            if roll < acc:
                level = name
                break

        candidates = [e for e in PAYLOAD_EVENTS if e["level"] == level]
        event = dict(self._rng.choice(candidates))
        event["event_id"] = f"{self._rng.randrange(16**7):X}"
        event["timestamp"] = datetime.now(timezone.utc).isoformat()
        event["source"] = "PAYLOAD_CONTROLLER"
        return event

    def next_delay_s(self) -> float:
        return self._rng.uniform(3.0, 12.0)


# ---------------------------------------- #


def send_payload_event(host: str, port: int, event: dict[str, Any]) -> None:
    with socket.create_connection((host, port), timeout=2.0) as sock:
        sock.sendall(json.dumps(event).encode("utf-8"))


# ---------------------------------------- #


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Send simulated vehicle and payload traffic")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--udp-port", type=int, default=14550)
    parser.add_argument("--tcp-port", type=int, default=9001)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--no-payload", action="store_true", help="Telemetry only")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    telemetry = TelemetrySimulator()
    payload = PayloadSimulator(seed=args.seed)

    now = time.monotonic()
    next_packet = {packet_type: now for packet_type, _ in PACKET_CADENCE}
    next_payload = now + payload.next_delay_s()

    udp = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    logger.info("Sending telemetry to udp %s:%d", args.host, args.udp_port)
    try:
        while True:
            now = time.monotonic()
            for packet_type, period in PACKET_CADENCE:
                if now >= next_packet[packet_type]:
                    pkt = telemetry.packet(packet_type)
                    udp.sendto(json.dumps(pkt).encode("utf-8"), (args.host, args.udp_port))
                    next_packet[packet_type] = now + period

            if not args.no_payload and now >= next_payload:
                event = payload.next_event()
                try:
                    send_payload_event(args.host, args.tcp_port, event)
                    logger.info("[%s] %s", event["level"], event["event"])
                except OSError as e:
                    logger.warning("Payload send failed (%s); is the console running?", e)
                next_payload = now + payload.next_delay_s()

            time.sleep(0.02)
    except KeyboardInterrupt:
        logger.info("Simulator stopped")
    finally:
        udp.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
