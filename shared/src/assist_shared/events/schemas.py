"""Pydantic v2 schemas shared by the tracker and its stream collaborators.

Stream naming convention: {domain}:{camera_id}
  detections:cam-01       — per-frame detector output (external detector)
  tracked_objects:cam-01  — priority-ordered tracked objects (rendering)
  announcements           — gated audio announcements (speech)
"""
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


# ── Enumerated annotations ────────────────────────────────────────────────────

class Heading(str, Enum):
    """8-way motion indicator plus the stationary marker."""

    RIGHT = "→"
    UP_RIGHT = "↗"
    UP = "↑"
    UP_LEFT = "↖"
    LEFT = "←"
    DOWN_LEFT = "↙"
    DOWN = "↓"
    DOWN_RIGHT = "↘"
    STATIONARY = "•"


class ProximityTier(str, Enum):
    VERY_CLOSE = "VERY CLOSE"
    GETTING_CLOSE = "GETTING CLOSE"
    SAFE_DISTANCE = "SAFE DISTANCE"


class RelativeDirection(str, Enum):
    LEFT = "left"
    FRONT = "front"
    RIGHT = "right"


# ── Detector → Tracker ────────────────────────────────────────────────────────

class BoundingBox(_FrozenModel):
    """Axis-aligned box in pixel coordinates of the frame it was detected in.

    No range validation here: negative sizes are rejected by the geometry
    helpers so that one bad box can be skipped without failing the frame.
    """

    origin_x: float
    origin_y: float
    width: float
    height: float

    @classmethod
    def from_xyxy(cls, x1: float, y1: float, x2: float, y2: float) -> BoundingBox:
        return cls(origin_x=x1, origin_y=y1, width=x2 - x1, height=y2 - y1)

    @property
    def right(self) -> float:
        return self.origin_x + self.width

    @property
    def bottom(self) -> float:
        return self.origin_y + self.height

    @property
    def center(self) -> tuple[float, float]:
        return (self.origin_x + self.width / 2.0, self.origin_y + self.height / 2.0)


class Detection(_FrozenModel):
    """One object reported by the detector for one frame."""

    box: BoundingBox
    label: str
    confidence: float = Field(description="Detector score, expected in [0,1]")


class DetectionFrameMessage(_FrozenModel):
    """All detections for a single frame.

    Stream: detections:{camera_id}
    """

    camera_id: str
    timestamp_ms: float = Field(description="Capture time in milliseconds (monotonic)")
    frame_seq: int = Field(description="Monotonically increasing frame counter per camera")
    width: int
    height: int
    frame_interval_ms: float | None = Field(
        default=None,
        description="Nominal time between frames; the service default is used when absent",
    )
    detector_ok: bool = Field(
        default=True,
        description="False when the detector failed for this frame; detections are ignored",
    )
    detections: list[Detection] = Field(default_factory=list)


# ── Tracker → Rendering / Speech ──────────────────────────────────────────────

class TrackedObject(_FrozenModel):
    """One tracked identity as seen in the current frame."""

    track_id: int
    label: str
    confidence: float
    box: BoundingBox
    center: tuple[float, float]
    speed: float = Field(description="Pixels per second")
    direction_deg: float = Field(description="atan2 convention, 0° = +x axis")
    heading: Heading
    is_moving: bool
    proximity_tier: ProximityTier
    relative_direction: RelativeDirection
    area_ratio: float
    is_important: bool
    priority: int = Field(description="0 = moving hazard, 1 = static obstacle, 2 = other")


class AnnouncementEvent(_FrozenModel):
    """A gated audio announcement for one tracked object.

    Stream: announcements
    """

    label: str
    confidence: float
    relative_direction: RelativeDirection
    proximity_tier: ProximityTier
    track_id: int
    timestamp_ms: float
    phrase: str = Field(description="Text handed to the speech collaborator")


class TrackedFrameMessage(_FrozenModel):
    """Result of one tracking pass.

    Stream: tracked_objects:{camera_id}
    """

    camera_id: str
    timestamp_ms: float
    frame_seq: int
    objects: list[TrackedObject] = Field(default_factory=list)
    announcement_count: int = 0
