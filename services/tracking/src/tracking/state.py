"""Explicit tracker state, owned by the caller and threaded through every pass."""
from __future__ import annotations

from dataclasses import dataclass, field

from tracking.track import Track


@dataclass
class AnnouncementState:
    """label → timestamp (ms) of the last announcement for that label."""

    last_announced_ms: dict[str, float] = field(default_factory=dict)

    def last(self, label: str) -> float | None:
        return self.last_announced_ms.get(label)

    def record(self, label: str, timestamp_ms: float) -> None:
        self.last_announced_ms[label] = timestamp_ms


@dataclass
class TrackerState:
    """Live tracks keyed by identity, the identity counter and alert cooldowns.

    Passes against one TrackerState must be serialized by the caller.
    """

    tracks: dict[int, Track] = field(default_factory=dict)
    next_track_id: int = 1
    announcements: AnnouncementState = field(default_factory=AnnouncementState)

    def allocate_track_id(self) -> int:
        track_id = self.next_track_id
        self.next_track_id += 1
        return track_id
