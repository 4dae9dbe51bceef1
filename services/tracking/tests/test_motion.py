"""Unit tests for motion, heading, proximity and relative direction."""
from __future__ import annotations

import math

import pytest

from assist_shared.events.schemas import (
    BoundingBox,
    Detection,
    Heading,
    ProximityTier,
    RelativeDirection,
)
from tracking.motion import (
    DISPLAY_THRESHOLDS,
    TRACKING_THRESHOLDS,
    estimate_motion,
    heading_for,
    proximity_thresholds,
    proximity_tier,
    relative_direction,
)
from tracking.track import Track


def _box(x: float, y: float, w: float = 20, h: float = 20) -> BoundingBox:
    return BoundingBox(origin_x=x, origin_y=y, width=w, height=h)


def _det(x: float, y: float) -> Detection:
    return Detection(box=_box(x, y), label="person", confidence=0.9)


# ── Velocity ──────────────────────────────────────────────────────────────────

def test_single_point_track_has_zero_velocity():
    track = Track.start(1, _det(10, 10), 0.0)
    estimate_motion(track)
    assert track.velocity == (0.0, 0.0)
    assert track.speed == 0.0
    assert not track.is_moving


def test_velocity_in_pixels_per_second():
    track = Track.start(1, _det(10, 10), 0.0)
    track.apply(_det(12, 11), 50.0)
    estimate_motion(track)

    vx, vy = track.velocity
    assert vx == pytest.approx(40.0)
    assert vy == pytest.approx(20.0)
    assert track.speed == pytest.approx(math.hypot(40.0, 20.0))
    assert track.direction_deg == pytest.approx(math.degrees(math.atan2(20.0, 40.0)))
    assert track.is_moving


def test_zero_elapsed_time_gives_zero_velocity():
    track = Track.start(1, _det(10, 10), 100.0)
    track.apply(_det(30, 30), 100.0)
    estimate_motion(track)
    assert track.speed == 0.0


def test_speed_at_threshold_is_not_moving():
    track = Track.start(1, _det(0, 0), 0.0)
    track.apply(_det(5, 0), 1000.0)   # exactly 5 px/s
    estimate_motion(track, min_speed=5.0)
    assert track.speed == pytest.approx(5.0)
    assert not track.is_moving


# ── Heading ───────────────────────────────────────────────────────────────────

def test_stationary_heading_ignores_direction():
    assert heading_for(123.0, is_moving=False) is Heading.STATIONARY


@pytest.mark.parametrize(
    "direction,expected",
    [
        (180.0, Heading.RIGHT),      # (360 mod 360) / 45 = 0
        (-90.0, Heading.UP),         # 90 / 45 = 2
        (0.0, Heading.LEFT),         # 180 / 45 = 4
        (90.0, Heading.DOWN),        # 270 / 45 = 6
        (-135.0, Heading.UP_RIGHT),  # 45 / 45 = 1
        (170.0, Heading.RIGHT),      # 350 / 45 = 7.78 → 8 mod 8 = 0
    ],
)
def test_heading_index_formula(direction, expected):
    assert heading_for(direction, is_moving=True) is expected


def test_heading_rounds_half_up():
    # 22.5 / 45 = 0.5 exactly
    assert heading_for(-157.5, is_moving=True) is Heading.UP_RIGHT


# ── Proximity ─────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "ratio,expected",
    [
        (0.20, ProximityTier.VERY_CLOSE),
        (0.10, ProximityTier.GETTING_CLOSE),
        (0.02, ProximityTier.SAFE_DISTANCE),
        (0.15, ProximityTier.GETTING_CLOSE),   # strict >
        (0.08, ProximityTier.SAFE_DISTANCE),   # strict >
    ],
)
def test_proximity_tiers_tracking_thresholds(ratio, expected):
    assert proximity_tier(ratio, TRACKING_THRESHOLDS) is expected


@pytest.mark.parametrize(
    "ratio,expected",
    [
        (0.21, ProximityTier.VERY_CLOSE),
        (0.20, ProximityTier.GETTING_CLOSE),
        (0.15, ProximityTier.GETTING_CLOSE),
        (0.10, ProximityTier.SAFE_DISTANCE),
    ],
)
def test_proximity_tiers_display_thresholds(ratio, expected):
    assert proximity_tier(ratio, DISPLAY_THRESHOLDS) is expected


def test_proximity_profiles_by_name():
    assert proximity_thresholds("tracking") == TRACKING_THRESHOLDS
    assert proximity_thresholds("display") == DISPLAY_THRESHOLDS
    with pytest.raises(ValueError, match="bogus"):
        proximity_thresholds("bogus")


# ── Relative direction ────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "x,expected",
    [
        (40, RelativeDirection.LEFT),     # centre 50 of 300
        (140, RelativeDirection.FRONT),   # centre 150
        (240, RelativeDirection.RIGHT),   # centre 250
    ],
)
def test_relative_direction_by_thirds(x, expected):
    assert relative_direction(_box(x, 0), frame_width=300) is expected
