"""
Tests for the presentation helpers shared by the map and HUD views.
"""

import pytest

from missionhub.telemetry.display import (
    BLUE,
    GREEN,
    GREY,
    ORANGE,
    RED,
    battery_bar_fraction,
    battery_color,
    cardinal_direction,
    severity_color,
    status_color,
)


@pytest.mark.parametrize(
    "level, color",
    [(95, GREEN), (51, GREEN), (50, ORANGE), (21, ORANGE), (20, RED), (-3, RED), ("n/a", GREY)],
)
def test_battery_color(level, color):
    assert battery_color(level) == color


def test_battery_bar_is_clamped():
    assert battery_bar_fraction(140) == 1.0
    assert battery_bar_fraction(-10) == 0.0
    assert battery_bar_fraction(42) == pytest.approx(0.42)
    assert battery_bar_fraction(None) == 0.0


@pytest.mark.parametrize(
    "degrees, name",
    [(0, "N"), (22.4, "N"), (22.5, "NE"), (90, "E"), (180, "S"), (270, "W"), (337.5, "N"), (359, "N"), (-90, "W"), (720, "N")],
)
def test_cardinal_direction(degrees, name):
    assert cardinal_direction(degrees) == name


def test_cardinal_direction_unparseable():
    assert cardinal_direction("east") == ""
    assert cardinal_direction(float("nan")) == ""


def test_status_and_severity_colors():
    assert status_color("ACTIVE") == GREEN
    assert status_color("auto") == GREEN
    assert status_color("STANDBY") == BLUE
    assert status_color("CRITICAL") == RED
    assert status_color("") == GREY
    assert severity_color("CRITICAL") == RED
    assert severity_color("WARN") == ORANGE
    assert severity_color("INFO") == BLUE
