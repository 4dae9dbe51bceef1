"""One tracking pass: associate → estimate → gate.

The pass is synchronous and does no I/O. Time, frame size and frame interval
are inputs, and all state lives in the TrackerState handed in by the caller.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field

from assist_shared.events.schemas import AnnouncementEvent, Detection, TrackedObject
from assist_shared.logging import get_logger

from tracking.alert_gate import AlertGate
from tracking.associator import TrackAssociator
from tracking.config import TrackingConfig
from tracking.errors import InvalidFrame, InvalidGeometry
from tracking.geometry import area_ratio, validate_box
from tracking.motion import (
    estimate_motion,
    heading_for,
    proximity_tier,
    relative_direction,
)
from tracking.state import TrackerState
from tracking.track import Track

log = get_logger(__name__)


@dataclass(frozen=True)
class FrameInfo:
    width: float
    height: float
    timestamp_ms: float
    frame_interval_ms: float

    def validate(self) -> None:
        if not (self.width > 0 and self.height > 0):
            raise InvalidFrame(f"frame has no area: {self.width}x{self.height}")
        if not self.frame_interval_ms > 0:
            raise InvalidFrame(f"frame interval must be positive: {self.frame_interval_ms}")
        if not math.isfinite(self.timestamp_ms):
            raise InvalidFrame(f"timestamp is not finite: {self.timestamp_ms}")


@dataclass
class PassResult:
    objects: list[TrackedObject] = field(default_factory=list)
    announcements: list[AnnouncementEvent] = field(default_factory=list)
    skipped_detections: int = 0
    retired_track_ids: list[int] = field(default_factory=list)


def _valid_detections(detections: list[Detection]) -> tuple[list[Detection], int]:
    valid: list[Detection] = []
    skipped = 0
    for detection in detections:
        try:
            validate_box(detection.box)
            if not 0.0 <= detection.confidence <= 1.0:
                raise InvalidGeometry(f"confidence out of range: {detection.confidence}")
        except InvalidGeometry as exc:
            skipped += 1
            log.warning("detection_skipped", label=detection.label, reason=str(exc))
            continue
        valid.append(detection)
    return valid, skipped


def describe_track(track: Track, frame: FrameInfo, config: TrackingConfig) -> TrackedObject:
    """Snapshot a track, with its derived annotations, for rendering."""
    ratio = area_ratio(track.last_box, frame.width, frame.height)
    return TrackedObject(
        track_id=track.track_id,
        label=track.label,
        confidence=track.confidence,
        box=track.last_box,
        center=track.center,
        speed=track.speed,
        direction_deg=track.direction_deg,
        heading=heading_for(track.direction_deg, track.is_moving),
        is_moving=track.is_moving,
        proximity_tier=proximity_tier(ratio, config.proximity),
        relative_direction=relative_direction(track.last_box, frame.width),
        area_ratio=ratio,
        is_important=config.alert_policy.is_important(track.label),
        priority=config.alert_policy.priority(track.label),
    )


def run_pass(
    state: TrackerState,
    detections: list[Detection],
    frame: FrameInfo,
    config: TrackingConfig,
) -> PassResult:
    """Run one tracking pass against ``state`` and return the annotated frame.

    An unusable frame leaves ``state`` untouched and yields an empty result.
    """
    try:
        frame.validate()
    except InvalidFrame as exc:
        log.warning("frame_skipped", reason=str(exc))
        return PassResult()

    valid, skipped = _valid_detections(detections)

    association = TrackAssociator(config).associate(
        state, valid, frame.timestamp_ms, frame.frame_interval_ms
    )

    objects: list[TrackedObject] = []
    for track in association.current:
        estimate_motion(track, config.min_speed_threshold)
        objects.append(describe_track(track, frame, config))

    ordered, announcements = AlertGate(config.alert_policy).evaluate(
        state.announcements, objects, frame.timestamp_ms
    )

    if association.retired:
        log.info(
            "tracks_retired",
            track_ids=[t.track_id for t in association.retired],
            live_tracks=len(state.tracks),
        )

    return PassResult(
        objects=ordered,
        announcements=announcements,
        skipped_detections=skipped,
        retired_track_ids=[t.track_id for t in association.retired],
    )


class ObjectTracker:
    """Owns a TrackerState for callers that process a single stream of frames.

    Args:
        config: Tracker tunables. Defaults match the reference thresholds.
    """

    def __init__(self, config: TrackingConfig | None = None) -> None:
        self._cfg = config or TrackingConfig()
        self._state = TrackerState()

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def live_track_count(self) -> int:
        return len(self._state.tracks)

    def update(
        self,
        detections: list[Detection],
        width: float,
        height: float,
        timestamp_ms: float,
        frame_interval_ms: float | None = None,
    ) -> PassResult:
        frame = FrameInfo(
            width=width,
            height=height,
            timestamp_ms=timestamp_ms,
            frame_interval_ms=(
                frame_interval_ms
                if frame_interval_ms is not None
                else self._cfg.default_frame_interval_ms
            ),
        )
        return run_pass(self._state, detections, frame, self._cfg)

    def reset(self) -> None:
        """Drop all tracks and cooldowns; identities restart at 1."""
        self._state = TrackerState()
