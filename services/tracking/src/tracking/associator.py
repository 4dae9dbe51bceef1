"""Track association: greedy one-to-one matching of detections to live tracks.

Each same-label (detection, track) pair gets a score:
  IoU                       if IoU > iou_threshold
  1 − distance / threshold  if centre distance < distance_threshold
  ineligible                otherwise
against the track's last seen box and, for a moving track that missed a few
frames, its predicted box; the better of the two counts.
Pairs are taken greedily in descending score order (ties: lower track id,
then lower detection index), so results are reproducible frame to frame.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from assist_shared.events.schemas import BoundingBox, Detection
from assist_shared.logging import get_logger

from tracking.config import TrackingConfig
from tracking.geometry import center_distance, intersection_over_union
from tracking.state import TrackerState
from tracking.track import Track

log = get_logger(__name__)


@dataclass
class AssociationResult:
    matched: list[Track] = field(default_factory=list)
    created: list[Track] = field(default_factory=list)
    missed: list[Track] = field(default_factory=list)
    retired: list[Track] = field(default_factory=list)

    @property
    def current(self) -> list[Track]:
        """Tracks observed in this frame (matched, then newly created)."""
        return self.matched + self.created


class TrackAssociator:
    """Matches one frame of detections against the live track set in a TrackerState."""

    def __init__(self, config: TrackingConfig) -> None:
        self._cfg = config

    def _box_score(self, detection: Detection, box: BoundingBox) -> float | None:
        iou = intersection_over_union(detection.box, box)
        if iou > self._cfg.iou_threshold:
            return iou
        distance = center_distance(detection.box, box)
        if distance < self._cfg.distance_threshold_px:
            return 1.0 - distance / self._cfg.distance_threshold_px
        return None

    def score(self, detection: Detection, track: Track, now_ms: float) -> float | None:
        """Match score for a pair, or None if the pair may not be matched.

        The last seen box always counts. A predicted box, when the track has
        one, can only raise the score.
        """
        if detection.label != track.label:
            return None
        boxes = (track.last_box, track.reference_box(now_ms, self._cfg.max_prediction_frames))
        scores = [s for s in (self._box_score(detection, b) for b in boxes) if s is not None]
        return max(scores, default=None)

    def associate(
        self,
        state: TrackerState,
        detections: list[Detection],
        now_ms: float,
        frame_interval_ms: float,
    ) -> AssociationResult:
        """Update ``state.tracks`` in place for one frame.

        Matched tracks absorb their detection; unmatched detections start new
        tracks; unmatched tracks age and are retired once stale.
        """
        candidates: list[tuple[float, int, int]] = []
        for det_idx, detection in enumerate(detections):
            for track_id, track in state.tracks.items():
                s = self.score(detection, track, now_ms)
                if s is not None:
                    candidates.append((s, track_id, det_idx))

        candidates.sort(key=lambda c: (-c[0], c[1], c[2]))

        assigned_tracks: set[int] = set()
        assigned_dets: set[int] = set()
        result = AssociationResult()

        for s, track_id, det_idx in candidates:
            if track_id in assigned_tracks or det_idx in assigned_dets:
                continue
            assigned_tracks.add(track_id)
            assigned_dets.add(det_idx)
            track = state.tracks[track_id]
            track.apply(detections[det_idx], now_ms)
            result.matched.append(track)
            log.debug("track_matched", track_id=track_id, label=track.label, score=round(s, 3))

        for det_idx, detection in enumerate(detections):
            if det_idx in assigned_dets:
                continue
            track = Track.start(
                state.allocate_track_id(),
                detection,
                now_ms,
                history_size=self._cfg.history_size,
            )
            state.tracks[track.track_id] = track
            result.created.append(track)
            log.debug(
                "track_created",
                track_id=track.track_id,
                label=track.label,
                confidence=round(detection.confidence, 3),
            )

        created_ids = {t.track_id for t in result.created}
        for track_id in list(state.tracks):
            if track_id in assigned_tracks or track_id in created_ids:
                continue
            track = state.tracks[track_id]
            track.mark_missed()
            if track.is_expired(frame_interval_ms, self._cfg.cleanup_delay_ms):
                del state.tracks[track_id]
                result.retired.append(track)
                log.debug(
                    "track_retired",
                    track_id=track_id,
                    label=track.label,
                    frames_since_match=track.frames_since_match,
                    hits=track.hits,
                )
            else:
                result.missed.append(track)

        return result
