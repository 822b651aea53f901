from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_NAME = "missionhub.toml"

_PORT_FIELDS = frozenset({"udp_port", "tcp_port"})


@dataclass(frozen=True)
class ConsoleConfig:
    udp_host: str = "0.0.0.0"
    udp_port: int = 14550
    tcp_host: str = "0.0.0.0"
    tcp_port: int = 9001
    poll_interval_ms: int = 50
    reconnect_interval_s: float = 2.0
    log_capacity: int = 5
    log_ttl_s: float = 8.0
    home_lat: float = 47.6062
    home_lon: float = -122.3321
    camera_device: str | None = None
    log_level: str = "INFO"


# ---------------------------------------- #


def _accepts(field_type: str, value: Any) -> bool:
    # bool is an int subclass; TOML booleans never belong in numeric keys.
    if isinstance(value, bool):
        return False
    if field_type == "int":
        return isinstance(value, int)
    if field_type == "float":
        return isinstance(value, (int, float))
    return isinstance(value, str)


def _valid_port(value: int) -> bool:
    # 0 asks the OS for an ephemeral port
    return 0 <= value <= 65535


# ---------------------------------------- #


def load_console_config(path: Path | None = None) -> ConsoleConfig:
    """
    Read the [console] table of a TOML file into a ConsoleConfig.

    A missing file or table yields the defaults. Keys with the wrong type,
    and ports outside 0-65535, are ignored and keep their default; unknown
    keys are ignored.
    """
    if path is None:
        path = Path.cwd() / DEFAULT_CONFIG_NAME

    try:
        import tomllib
    except Exception as exc:  # pragma: no cover
        raise RuntimeError("tomllib unavailable; need Python 3.11+") from exc

    try:
        data: Any = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return ConsoleConfig()

    table = data.get("console")
    if not isinstance(table, dict):
        return ConsoleConfig()

    values: dict[str, Any] = {}
    for f in dataclasses.fields(ConsoleConfig):
        if f.name not in table:
            continue
        value = table[f.name]
        field_type = str(f.type).split(" | ")[0]
        if not _accepts(field_type, value):
            continue
        if f.name in _PORT_FIELDS and not _valid_port(value):
            continue
        if field_type == "float":
            value = float(value)
        values[f.name] = value

    return ConsoleConfig(**values)
