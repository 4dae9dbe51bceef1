"""State of a single tracked identity across frames."""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

from assist_shared.events.schemas import BoundingBox, Detection

from tracking.geometry import shift_box

HISTORY_SIZE = 30   # past boxes kept per track


@dataclass(frozen=True)
class TrackPoint:
    box: BoundingBox
    timestamp_ms: float

    @property
    def center(self) -> tuple[float, float]:
        return self.box.center


@dataclass
class Track:
    """One persistent identity.

    ``label`` is fixed at creation. Velocity fields are written by
    ``tracking.motion.estimate_motion`` after each match.
    """

    track_id: int
    label: str
    last_box: BoundingBox
    last_update_ms: float
    confidence: float
    history: deque = field(default_factory=lambda: deque(maxlen=HISTORY_SIZE))
    frames_since_match: int = 0
    hits: int = 1
    velocity: tuple[float, float] = (0.0, 0.0)   # px/s
    speed: float = 0.0
    direction_deg: float = 0.0
    is_moving: bool = False

    @classmethod
    def start(
        cls,
        track_id: int,
        detection: Detection,
        timestamp_ms: float,
        history_size: int = HISTORY_SIZE,
    ) -> Track:
        track = cls(
            track_id=track_id,
            label=detection.label,
            last_box=detection.box,
            last_update_ms=timestamp_ms,
            confidence=detection.confidence,
            history=deque(maxlen=history_size),
        )
        track.history.append(TrackPoint(detection.box, timestamp_ms))
        return track

    def apply(self, detection: Detection, timestamp_ms: float) -> None:
        """Record a matched detection. The label never changes."""
        self.history.append(TrackPoint(detection.box, timestamp_ms))
        self.last_box = detection.box
        self.last_update_ms = timestamp_ms
        self.confidence = detection.confidence
        self.frames_since_match = 0
        self.hits += 1

    def mark_missed(self) -> None:
        self.frames_since_match += 1

    def is_expired(self, frame_interval_ms: float, cleanup_delay_ms: float) -> bool:
        return self.frames_since_match * frame_interval_ms > cleanup_delay_ms

    def reference_box(self, now_ms: float, max_prediction_frames: int) -> BoundingBox:
        """Box to associate against in the current frame.

        A moving track that missed a few frames is extrapolated along its
        velocity; otherwise the last seen box is used.
        """
        if not self.is_moving or not 0 < self.frames_since_match <= max_prediction_frames:
            return self.last_box
        elapsed_s = max(now_ms - self.last_update_ms, 0.0) / 1000.0
        vx, vy = self.velocity
        return shift_box(self.last_box, vx * elapsed_s, vy * elapsed_s)

    @property
    def center(self) -> tuple[float, float]:
        return self.last_box.center

    @property
    def previous_point(self) -> TrackPoint | None:
        if len(self.history) < 2:
            return None
        return self.history[-2]
