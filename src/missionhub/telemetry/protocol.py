from __future__ import annotations

import json
import logging
from typing import Any, Final

from missionhub.telemetry.events import (
    COMMAND_ABSENT,
    COMMAND_DEGRADED,
    COMMAND_OK,
    MALFORMED_JSON,
    MALFORMED_NESTED_COMMAND,
    CommandDecode,
    DecodeFailure,
    RawEnvelope,
)
from missionhub.util.time import format_timestamp, now_unix

logger = logging.getLogger("missionhub.protocol")

TOPIC_BACKEND_EVENT: Final[str] = "new-backend-event"

SOURCE_DRONE: Final[str] = "DRONE"
SOURCE_PAYLOAD: Final[str] = "PAYLOAD"

TELEMETRY_KEYS: Final[tuple[str, ...]] = (
    "lat",
    "lon",
    "alt",
    "vx",
    "vy",
    "vz",
    "battery_remaining",
    "heading",
    "system_status",
    "gps_fix",
    "errors_count",
)

METADATA_PREFIX: Final[str] = "METADATA:"


# ---------------------------------------- #


def decode_envelope(raw: str) -> RawEnvelope | DecodeFailure:
    """
    Parse one inbound payload.

    Never raises: anything that is not a JSON object comes back as a
    DecodeFailure and is logged for diagnostics only.
    """
    try:
        obj = json.loads(raw)
    except (TypeError, ValueError, RecursionError) as exc:
        logger.warning("Dropping malformed payload (%s): %r", exc, raw)
        return DecodeFailure(reason=MALFORMED_JSON, raw=str(raw), detail=str(exc))

    if not isinstance(obj, dict):
        logger.warning("Dropping non-object payload: %r", raw)
        return DecodeFailure(
            reason=MALFORMED_JSON, raw=raw, detail="payload is not a JSON object"
        )

    source = obj.get("source")
    message = obj.get("message")
    data = obj.get("data")
    timestamp = obj.get("timestamp")

    return RawEnvelope(
        source=source if isinstance(source, str) else "",
        timestamp=timestamp if isinstance(timestamp, str) else "",
        message=message if isinstance(message, str) else None,
        data=data if isinstance(data, dict) else None,
    )


# ---------------------------------------- #


def decode_command(data: dict[str, Any] | None) -> CommandDecode:
    """Second-stage decode of the event descriptor carried in data.command."""
    command = (data or {}).get("command")
    if command is None or command == "":
        return CommandDecode(status=COMMAND_ABSENT)

    if isinstance(command, dict):
        # Already structured; some bridges skip the string encoding.
        return CommandDecode(status=COMMAND_OK, descriptor=command)

    try:
        descriptor = json.loads(command)
    except (TypeError, ValueError, RecursionError) as exc:
        logger.info("Nested command is not JSON (%s): %r", exc, command)
        return CommandDecode(status=COMMAND_DEGRADED, reason=MALFORMED_NESTED_COMMAND)

    if not isinstance(descriptor, dict):
        logger.info("Nested command is not an object: %r", command)
        return CommandDecode(status=COMMAND_DEGRADED, reason=MALFORMED_NESTED_COMMAND)

    return CommandDecode(status=COMMAND_OK, descriptor=descriptor)


# ---------------------------------------- #


def encode_envelope(
    source: str,
    message: str,
    data: dict[str, Any] | None = None,
    t_unix: float | None = None,
) -> str:
    event = {
        "timestamp": format_timestamp(now_unix() if t_unix is None else t_unix),
        "source": source,
        "message": message,
        "data": data,
    }
    return json.dumps(event, separators=(",", ":"))


# ---------------------------------------- #


def telemetry_envelope(packet: dict[str, Any], t_unix: float | None = None) -> str | None:
    """
    Bridge one MAVLink-style JSON packet into a DRONE envelope.

    Packets without a string packet_type are rejected (None).
    """
    packet_type = packet.get("packet_type")
    if not isinstance(packet_type, str):
        return None

    data = {k: packet[k] for k in TELEMETRY_KEYS if packet.get(k) is not None}
    return encode_envelope(
        SOURCE_DRONE, f"Position update: {packet_type}", data, t_unix=t_unix
    )


# ---------------------------------------- #


def payload_envelope(command: str, sender: str, t_unix: float | None = None) -> str:
    return encode_envelope(
        SOURCE_PAYLOAD,
        f"Command: {command}",
        {"command": command, "sender": sender},
        t_unix=t_unix,
    )


# ---------------------------------------- #


def split_commands(text: str) -> list[str]:
    """
    Non-empty, non-metadata lines of a TCP payload chunk.

    Only LF ends a line (CR is stripped). Other Unicode line breaks such as
    U+2028 may sit raw inside a JSON string and stay part of the command.
    """
    commands: list[str] = []
    for line in text.split("\n"):
        clean = line.strip()
        if not clean or clean.startswith(METADATA_PREFIX):
            continue
        commands.append(clean)
    return commands
