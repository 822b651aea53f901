"""
Tests for rendering subsystem events as toast lines.
"""

from missionhub.telemetry.events import SEVERITY_CRITICAL, SEVERITY_INFO, SEVERITY_WARN
from missionhub.telemetry.formatter import (
    data_point_fragments,
    event_severity,
    format_subsystem_event,
    humanize_event_name,
)


def test_low_storage_event():
    descriptor = {
        "event": "LOW_STORAGE_WARNING",
        "level": "WARN",
        "subsystem": "STORAGE",
        "details": "Storage space below 20%.",
        "data": {"available": "18%", "used": "164GB"},
    }
    assert format_subsystem_event(descriptor) == (
        "STORAGE: Storage space below 20%. (Available: 18%, Used: 164GB)",
        SEVERITY_WARN,
    )


def test_empty_descriptor():
    assert format_subsystem_event({}) == ("SYSTEM: Unknown Event", SEVERITY_INFO)


def test_event_name_used_without_details():
    message, severity = format_subsystem_event(
        {"event": "THERMAL_SCAN_COMPLETE", "subsystem": "THERMAL", "level": "CRITICAL"}
    )
    assert message == "THERMAL: Thermal Scan Complete"
    assert severity == SEVERITY_CRITICAL


def test_unknown_level_defaults_to_info():
    for level in ("DEBUG", "warn", None, 3, ["WARN"]):
        assert event_severity(level) == SEVERITY_INFO


def test_at_most_two_fragments_in_priority_order():
    data = {"eta": "90s", "reason": "FAULT", "used": "1GB", "scan_area": "5x5"}
    assert data_point_fragments(data) == ["Scan Area: 5x5", "Used: 1GB"]


def test_empty_and_null_values_are_skipped():
    data = {"resolution": "", "fps": None, "max_temp": 0, "anomalies": 2}
    assert data_point_fragments(data) == ["Max Temp: 0", "Anomalies: 2"]


def test_unlisted_keys_are_ignored():
    assert data_point_fragments({"data_loss": "NONE", "foo": 1}) == []
    assert data_point_fragments("not a mapping") == []


def test_custom_labels():
    assert data_point_fragments({"eta_next": "2.3 min"}) == ["Next ETA: 2.3 min"]
    assert data_point_fragments({"backup_status": "ACTIVE"}) == ["Backup: ACTIVE"]


def test_humanize_event_name():
    assert humanize_event_name("WEAK_GPS_SIGNAL") == "Weak Gps Signal"
    assert humanize_event_name("") == "Unknown Event"
    assert humanize_event_name(None) == "Unknown Event"
