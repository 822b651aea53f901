from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Final

SEVERITY_INFO: Final[str] = "INFO"
SEVERITY_WARN: Final[str] = "WARN"
SEVERITY_CRITICAL: Final[str] = "CRITICAL"

SEVERITIES: Final[frozenset[str]] = frozenset(
    {SEVERITY_INFO, SEVERITY_WARN, SEVERITY_CRITICAL}
)

MALFORMED_JSON: Final[str] = "MALFORMED_JSON"
MALFORMED_NESTED_COMMAND: Final[str] = "MALFORMED_NESTED_COMMAND"
TRANSPORT_UNAVAILABLE: Final[str] = "TRANSPORT_UNAVAILABLE"

COMMAND_OK: Final[str] = "OK"
COMMAND_ABSENT: Final[str] = "ABSENT"
COMMAND_DEGRADED: Final[str] = "DEGRADED"


@dataclass(frozen=True)
class RawEnvelope:
    source: str
    timestamp: str = ""
    message: str | None = None
    data: dict[str, Any] | None = None


@dataclass(frozen=True)
class DecodeFailure:
    reason: str
    raw: str
    detail: str = ""


@dataclass(frozen=True)
class CommandDecode:
    """Outcome of decoding the event descriptor nested in data.command."""

    status: str
    descriptor: dict[str, Any] = field(default_factory=dict)
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == COMMAND_OK


@dataclass(frozen=True)
class TelemetryUpdate:
    envelope: RawEnvelope
    update: dict[str, Any]


@dataclass(frozen=True)
class SubsystemEvent:
    envelope: RawEnvelope
    command: CommandDecode

    @property
    def descriptor(self) -> dict[str, Any]:
        return self.command.descriptor


ClassifiedEvent = TelemetryUpdate | SubsystemEvent
