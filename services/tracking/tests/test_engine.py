"""Integration tests for a full tracking pass (associate → estimate → gate)."""
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
from tracking.config import TrackingConfig
from tracking.engine import FrameInfo, ObjectTracker, run_pass
from tracking.motion import DISPLAY_THRESHOLDS
from tracking.state import TrackerState


def _det(x: float, y: float, w: float = 20, h: float = 20, label: str = "person",
         confidence: float = 0.9) -> Detection:
    return Detection(
        box=BoundingBox(origin_x=x, origin_y=y, width=w, height=h),
        label=label,
        confidence=confidence,
    )


@pytest.fixture()
def tracker() -> ObjectTracker:
    return ObjectTracker(TrackingConfig())


def test_person_walking_across_two_frames(tracker):
    first = tracker.update([_det(10, 10)], 100, 100, timestamp_ms=0.0, frame_interval_ms=50.0)
    second = tracker.update([_det(12, 11)], 100, 100, timestamp_ms=50.0, frame_interval_ms=50.0)

    assert len(second.objects) == 1
    obj = second.objects[0]
    assert obj.track_id == 1
    assert obj.is_moving
    assert obj.speed == pytest.approx(math.hypot(40.0, 20.0))
    assert obj.heading is Heading.DOWN_LEFT
    assert obj.proximity_tier is ProximityTier.SAFE_DISTANCE
    assert obj.area_ratio == pytest.approx(0.04)
    assert obj.relative_direction is RelativeDirection.LEFT
    assert obj.is_important

    # Announced once on first sight, then held by the cooldown
    assert len(first.announcements) + len(second.announcements) == 1
    assert first.announcements[0].phrase == "person on your left, safe distance"


def test_first_sighting_is_stationary(tracker):
    result = tracker.update([_det(10, 10)], 100, 100, timestamp_ms=0.0)
    obj = result.objects[0]
    assert not obj.is_moving
    assert obj.speed == 0.0
    assert obj.heading is Heading.STATIONARY


def test_person_listed_before_larger_chair(tracker):
    result = tracker.update(
        [
            _det(0, 0, w=50, h=10, label="chair"),    # ratio 0.05
            _det(60, 60, w=30, h=10, label="person"),  # ratio 0.03
        ],
        100, 100, timestamp_ms=0.0,
    )
    assert [o.label for o in result.objects] == ["person", "chair"]
    assert [e.label for e in result.announcements] == ["person", "chair"]


def test_small_unimportant_object_is_tracked_but_silent(tracker):
    result = tracker.update([_det(0, 0, w=5, h=5, label="cup")], 100, 100, timestamp_ms=0.0)
    assert [o.label for o in result.objects] == ["cup"]
    assert not result.objects[0].is_important
    assert result.announcements == []


def test_invalid_detection_is_skipped(tracker):
    result = tracker.update(
        [_det(0, 0, w=-5, h=10), _det(50, 50), _det(10, 10, confidence=1.5)],
        100, 100, timestamp_ms=0.0,
    )
    assert result.skipped_detections == 2
    assert [o.track_id for o in result.objects] == [1]
    assert tracker.live_track_count == 1


@pytest.mark.parametrize(
    "width,height,interval,timestamp",
    [
        (0, 100, 50.0, 0.0),
        (100, 0, 50.0, 0.0),
        (100, 100, 0.0, 0.0),
        (100, 100, 50.0, math.nan),
    ],
)
def test_invalid_frame_leaves_state_untouched(width, height, interval, timestamp):
    state = TrackerState()
    config = TrackingConfig()
    run_pass(state, [_det(10, 10)], FrameInfo(100, 100, 0.0, 50.0), config)

    result = run_pass(state, [_det(60, 60)], FrameInfo(width, height, timestamp, interval), config)

    assert result.objects == []
    assert result.announcements == []
    assert list(state.tracks) == [1]
    assert state.tracks[1].frames_since_match == 0
    assert state.next_track_id == 2


def test_coasting_track_is_not_output_but_kept(tracker):
    tracker.update([_det(10, 10)], 100, 100, timestamp_ms=0.0, frame_interval_ms=100.0)
    result = tracker.update([], 100, 100, timestamp_ms=100.0, frame_interval_ms=100.0)
    assert result.objects == []
    assert tracker.live_track_count == 1


def test_track_retired_through_tracker(tracker):
    tracker.update([_det(10, 10)], 100, 100, timestamp_ms=0.0, frame_interval_ms=100.0)
    retired: list[int] = []
    for i in range(1, 17):
        result = tracker.update([], 100, 100, timestamp_ms=i * 100.0, frame_interval_ms=100.0)
        retired.extend(result.retired_track_ids)
    assert retired == [1]
    assert tracker.live_track_count == 0


def test_track_ids_strictly_increase(tracker):
    seen: list[int] = []
    for i in range(5):
        # Each box is far from the previous one, so every frame starts a new track
        result = tracker.update(
            [_det(i * 200, 0)], 1000, 100, timestamp_ms=i * 50.0, frame_interval_ms=50.0
        )
        seen.extend(o.track_id for o in result.objects)
    assert seen == [1, 2, 3, 4, 5]


def test_cooldown_spans_frames(tracker):
    fired = []
    for t in (0.0, 2000.0, 3500.0):
        result = tracker.update([_det(10, 10)], 100, 100, timestamp_ms=t, frame_interval_ms=50.0)
        fired.append(len(result.announcements))
    assert fired == [1, 0, 1]


def test_display_profile_changes_proximity():
    tracker = ObjectTracker(TrackingConfig(proximity=DISPLAY_THRESHOLDS))
    # ratio 0.18: VERY CLOSE under the default profile, GETTING CLOSE here
    result = tracker.update([_det(0, 0, w=60, h=30)], 100, 100, timestamp_ms=0.0)
    assert result.objects[0].proximity_tier is ProximityTier.GETTING_CLOSE


def test_reset_starts_a_new_session(tracker):
    tracker.update([_det(10, 10)], 100, 100, timestamp_ms=0.0)
    tracker.reset()
    assert tracker.live_track_count == 0

    result = tracker.update([_det(10, 10)], 100, 100, timestamp_ms=100.0)
    assert result.objects[0].track_id == 1
    # Cooldowns were cleared too
    assert len(result.announcements) == 1


def test_default_frame_interval_used_when_absent():
    config = TrackingConfig(default_frame_interval_ms=500.0)
    tracker = ObjectTracker(config)
    tracker.update([_det(10, 10)], 100, 100, timestamp_ms=0.0)
    # 3 misses × 500 ms = 1500 ms: kept; the 4th retires it
    for i in range(1, 4):
        assert tracker.update([], 100, 100, timestamp_ms=i * 500.0).retired_track_ids == []
    assert tracker.update([], 100, 100, timestamp_ms=2000.0).retired_track_ids == [1]
