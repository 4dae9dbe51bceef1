"""Motion and proximity estimation for matched tracks.

Velocity is measured between the two most recent history points, in pixels
per second. Proximity is a coarse tier derived from the fraction of the frame
the box covers. All thresholds compare with a strict ``>``.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from assist_shared.events.schemas import (
    BoundingBox,
    Heading,
    ProximityTier,
    RelativeDirection,
)

from tracking.track import Track

MIN_SPEED_THRESHOLD = 5.0   # px/s

# Index order used by heading_for(); see the formula there.
_HEADINGS = (
    Heading.RIGHT,
    Heading.UP_RIGHT,
    Heading.UP,
    Heading.UP_LEFT,
    Heading.LEFT,
    Heading.DOWN_LEFT,
    Heading.DOWN,
    Heading.DOWN_RIGHT,
)

# Horizontal thirds of the frame
_LEFT_EDGE = 1.0 / 3.0
_RIGHT_EDGE = 2.0 / 3.0


@dataclass(frozen=True)
class ProximityThresholds:
    very_close: float
    getting_close: float


TRACKING_THRESHOLDS = ProximityThresholds(very_close=0.15, getting_close=0.08)
DISPLAY_THRESHOLDS = ProximityThresholds(very_close=0.2, getting_close=0.1)

PROXIMITY_PROFILES: dict[str, ProximityThresholds] = {
    "tracking": TRACKING_THRESHOLDS,
    "display": DISPLAY_THRESHOLDS,
}


def proximity_thresholds(profile: str) -> ProximityThresholds:
    if profile not in PROXIMITY_PROFILES:
        raise ValueError(
            f"Unknown proximity profile '{profile}'. Available: {list(PROXIMITY_PROFILES)}"
        )
    return PROXIMITY_PROFILES[profile]


def estimate_motion(track: Track, min_speed: float = MIN_SPEED_THRESHOLD) -> None:
    """Recompute velocity, speed, direction and is_moving on ``track``."""
    prev = track.previous_point
    vx = vy = 0.0
    if prev is not None:
        elapsed_s = (track.last_update_ms - prev.timestamp_ms) / 1000.0
        if elapsed_s > 0:
            cx, cy = track.center
            px, py = prev.center
            vx = (cx - px) / elapsed_s
            vy = (cy - py) / elapsed_s

    track.velocity = (vx, vy)
    track.speed = math.hypot(vx, vy)
    track.direction_deg = math.degrees(math.atan2(vy, vx))
    track.is_moving = track.speed > min_speed


def heading_for(direction_deg: float, is_moving: bool) -> Heading:
    """Map a direction to one of 8 indicators; stationary is always •.

    index = round(((direction + 180) mod 360) / 45) mod 8, rounding halves up.
    """
    if not is_moving:
        return Heading.STATIONARY
    index = math.floor(((direction_deg + 180.0) % 360.0) / 45.0 + 0.5) % 8
    return _HEADINGS[index]


def proximity_tier(
    ratio: float,
    thresholds: ProximityThresholds = TRACKING_THRESHOLDS,
) -> ProximityTier:
    if ratio > thresholds.very_close:
        return ProximityTier.VERY_CLOSE
    if ratio > thresholds.getting_close:
        return ProximityTier.GETTING_CLOSE
    return ProximityTier.SAFE_DISTANCE


def relative_direction(box: BoundingBox, frame_width: float) -> RelativeDirection:
    """Where the object sits left-to-right in the frame, ignoring its motion."""
    position = box.center[0] / frame_width
    if position < _LEFT_EDGE:
        return RelativeDirection.LEFT
    if position > _RIGHT_EDGE:
        return RelativeDirection.RIGHT
    return RelativeDirection.FRONT
