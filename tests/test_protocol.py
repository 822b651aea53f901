"""
Tests for envelope decoding and the bridge-side envelope builders.
"""

import json

from missionhub.telemetry.events import (
    COMMAND_ABSENT,
    COMMAND_DEGRADED,
    COMMAND_OK,
    MALFORMED_JSON,
    MALFORMED_NESTED_COMMAND,
    DecodeFailure,
    RawEnvelope,
)
from missionhub.telemetry.protocol import (
    decode_command,
    decode_envelope,
    payload_envelope,
    split_commands,
    telemetry_envelope,
)


def test_malformed_json_is_a_failure():
    result = decode_envelope("{not json")
    assert isinstance(result, DecodeFailure)
    assert result.reason == MALFORMED_JSON
    assert result.raw == "{not json"


def test_non_object_json_is_a_failure():
    for raw in ("[1, 2]", "42", '"text"', "null"):
        result = decode_envelope(raw)
        assert isinstance(result, DecodeFailure), raw
        assert result.reason == MALFORMED_JSON


def test_envelope_fields_are_type_filtered():
    raw = json.dumps({"source": "DRONE", "timestamp": 5, "message": ["x"], "data": "nope"})
    result = decode_envelope(raw)
    assert result == RawEnvelope(source="DRONE", timestamp="", message=None, data=None)


def test_envelope_without_source_decodes():
    result = decode_envelope('{"data": {"alt": 10}}')
    assert isinstance(result, RawEnvelope)
    assert result.source == ""
    assert result.data == {"alt": 10}


# ---------------------------------------- #


def test_nested_command_ok():
    decoded = decode_command({"command": '{"event": "CAMERA_INIT", "level": "INFO"}'})
    assert decoded.status == COMMAND_OK
    assert decoded.ok
    assert decoded.descriptor == {"event": "CAMERA_INIT", "level": "INFO"}


def test_nested_command_already_an_object():
    decoded = decode_command({"command": {"event": "X"}})
    assert decoded.ok
    assert decoded.descriptor == {"event": "X"}


def test_nested_command_absent():
    assert decode_command(None).status == COMMAND_ABSENT
    assert decode_command({}).status == COMMAND_ABSENT
    assert decode_command({"command": ""}).status == COMMAND_ABSENT


def test_nested_command_malformed_degrades():
    for command in ("not json at all", "[1, 2, 3]", "17"):
        decoded = decode_command({"command": command})
        assert decoded.status == COMMAND_DEGRADED, command
        assert decoded.reason == MALFORMED_NESTED_COMMAND
        assert decoded.descriptor == {}


# ---------------------------------------- #


def test_telemetry_envelope_keeps_known_keys():
    raw = telemetry_envelope(
        {"packet_type": "GLOBAL_POSITION_INT", "lat": 47.6, "lon": -122.3, "alt": None, "roll": 0.1},
        t_unix=0,
    )
    event = json.loads(raw)
    assert event["source"] == "DRONE"
    assert event["message"] == "Position update: GLOBAL_POSITION_INT"
    assert event["timestamp"] == "00:00:00"
    assert event["data"] == {"lat": 47.6, "lon": -122.3}


def test_telemetry_envelope_requires_packet_type():
    assert telemetry_envelope({"lat": 1.0}) is None
    assert telemetry_envelope({"packet_type": 3}) is None


def test_payload_envelope_wraps_command_string():
    event = json.loads(payload_envelope('{"event": "X"}', "1.2.3.4:5", t_unix=3661))
    assert event["source"] == "PAYLOAD"
    assert event["message"] == 'Command: {"event": "X"}'
    assert event["timestamp"] == "01:01:01"
    assert event["data"] == {"command": '{"event": "X"}', "sender": "1.2.3.4:5"}


def test_split_commands_skips_blank_and_metadata_lines():
    text = 'METADATA:{"size": 3}\n\n  {"event": "A"}  \r\n{"event": "B"}'
    assert split_commands(text) == ['{"event": "A"}', '{"event": "B"}']


def test_deeply_nested_payload_is_a_failure():
    raw = "[" * 100_000 + "]" * 100_000
    result = decode_envelope(raw)
    assert isinstance(result, DecodeFailure)
    assert result.reason == MALFORMED_JSON


def test_deeply_nested_command_degrades():
    decoded = decode_command({"command": "[" * 100_000 + "]" * 100_000})
    assert decoded.status == COMMAND_DEGRADED
    assert decoded.reason == MALFORMED_NESTED_COMMAND


def test_split_commands_keeps_unicode_line_separators():
    details = "a\u2028b\u2029c\x85d"
    command = json.dumps({"event": "X", "details": details}, ensure_ascii=False)
    (only,) = split_commands(command + "\r\n")
    assert json.loads(only)["details"] == details
