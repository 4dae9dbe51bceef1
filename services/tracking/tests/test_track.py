"""Unit tests for Track state and lifecycle helpers."""
from __future__ import annotations

import pytest

from assist_shared.events.schemas import BoundingBox, Detection
from tracking.track import HISTORY_SIZE, Track


def _det(x: float, y: float, w: float = 20, h: float = 20, label: str = "person",
         confidence: float = 0.9) -> Detection:
    return Detection(
        box=BoundingBox(origin_x=x, origin_y=y, width=w, height=h),
        label=label,
        confidence=confidence,
    )


def test_start_records_first_point():
    track = Track.start(7, _det(10, 10), 0.0)
    assert track.track_id == 7
    assert track.label == "person"
    assert len(track.history) == 1
    assert track.frames_since_match == 0
    assert track.hits == 1
    assert track.previous_point is None


def test_history_is_bounded():
    track = Track.start(1, _det(0, 0), 0.0)
    for i in range(1, 40):
        track.apply(_det(i, 0), i * 50.0)
    assert len(track.history) == HISTORY_SIZE
    # Oldest points dropped first
    assert track.history[0].box.origin_x == 40 - HISTORY_SIZE
    assert track.hits == 40


def test_apply_resets_missed_counter_and_keeps_label():
    track = Track.start(1, _det(0, 0), 0.0)
    track.mark_missed()
    track.mark_missed()
    assert track.frames_since_match == 2

    track.apply(_det(1, 1, label="dog", confidence=0.4), 150.0)
    assert track.frames_since_match == 0
    assert track.label == "person"
    assert track.confidence == 0.4
    assert track.last_update_ms == 150.0


def test_is_expired_uses_strict_threshold():
    track = Track.start(1, _det(0, 0), 0.0)
    for _ in range(15):
        track.mark_missed()
    assert not track.is_expired(frame_interval_ms=100, cleanup_delay_ms=1500)
    track.mark_missed()
    assert track.is_expired(frame_interval_ms=100, cleanup_delay_ms=1500)


def test_reference_box_predicts_moving_track_after_a_miss():
    track = Track.start(1, _det(0, 0), 0.0)
    track.velocity = (100.0, -50.0)
    track.is_moving = True
    track.mark_missed()

    predicted = track.reference_box(now_ms=100.0, max_prediction_frames=3)
    assert predicted.origin_x == pytest.approx(10.0)
    assert predicted.origin_y == pytest.approx(-5.0)


def test_reference_box_uses_last_box_when_matched_or_lost_too_long():
    track = Track.start(1, _det(0, 0), 0.0)
    track.velocity = (100.0, 0.0)
    track.is_moving = True

    # Matched last frame: no extrapolation
    assert track.reference_box(now_ms=50.0, max_prediction_frames=3) == track.last_box

    for _ in range(4):
        track.mark_missed()
    assert track.reference_box(now_ms=200.0, max_prediction_frames=3) == track.last_box


def test_reference_box_ignores_stationary_tracks():
    track = Track.start(1, _det(0, 0), 0.0)
    track.mark_missed()
    assert track.reference_box(now_ms=100.0, max_prediction_frames=3) == track.last_box
