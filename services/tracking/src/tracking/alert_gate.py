"""Alert gate: orders tracked objects and decides which ones get announced.

Ordering: important labels first (moving hazards before static obstacles),
then larger area ratio (closer) first.
Throttling: one cooldown clock per label, shared by every instance of it, so
two people in the same frame produce a single "person" announcement.
"""
from __future__ import annotations

from assist_shared.events.schemas import (
    AnnouncementEvent,
    ProximityTier,
    RelativeDirection,
    TrackedObject,
)
from assist_shared.logging import get_logger

from tracking.alert_policy import DEFAULT_ALERT_POLICY, AlertPolicy
from tracking.state import AnnouncementState

log = get_logger(__name__)

_DIRECTION_PHRASES = {
    RelativeDirection.LEFT: "on your left",
    RelativeDirection.FRONT: "ahead",
    RelativeDirection.RIGHT: "on your right",
}


def announcement_phrase(
    label: str,
    direction: RelativeDirection,
    tier: ProximityTier,
) -> str:
    """Short sentence for the speech collaborator, e.g. 'person ahead, very close'."""
    return f"{label} {_DIRECTION_PHRASES[direction]}, {tier.value.lower()}"


def priority_order(objects: list[TrackedObject]) -> list[TrackedObject]:
    """Sort by priority tier, then area ratio (larger first), then track id.

    The tier outranks size and proximity: every hazard (person, car, ...)
    comes before every obstacle (chair, door, ...), which comes before
    unlisted labels. A VERY CLOSE chair at ratio 0.3 is therefore listed
    after a distant person at 0.01.
    """
    return sorted(
        objects,
        key=lambda o: (o.priority, -o.area_ratio, o.track_id),
    )


class AlertGate:
    """Applies the alert policy to one frame's tracked objects."""

    def __init__(self, policy: AlertPolicy = DEFAULT_ALERT_POLICY) -> None:
        self._policy = policy

    @property
    def policy(self) -> AlertPolicy:
        return self._policy

    def cooled_down(self, state: AnnouncementState, label: str, now_ms: float) -> bool:
        last = state.last(label)
        return last is None or now_ms - last > self._policy.cooldown_ms

    def evaluate(
        self,
        state: AnnouncementState,
        objects: list[TrackedObject],
        now_ms: float,
    ) -> tuple[list[TrackedObject], list[AnnouncementEvent]]:
        """Return (objects in priority order, announcements in the same order).

        Records every fired announcement in ``state``.
        """
        ordered = priority_order(objects)
        events: list[AnnouncementEvent] = []

        for obj in ordered:
            if not self._policy.is_eligible(obj.label, obj.area_ratio):
                continue
            if not self.cooled_down(state, obj.label, now_ms):
                continue

            state.record(obj.label, now_ms)
            events.append(
                AnnouncementEvent(
                    label=obj.label,
                    confidence=obj.confidence,
                    relative_direction=obj.relative_direction,
                    proximity_tier=obj.proximity_tier,
                    track_id=obj.track_id,
                    timestamp_ms=now_ms,
                    phrase=announcement_phrase(
                        obj.label, obj.relative_direction, obj.proximity_tier
                    ),
                )
            )
            log.debug(
                "announcement_fired",
                track_id=obj.track_id,
                label=obj.label,
                proximity=obj.proximity_tier.value,
                direction=obj.relative_direction.value,
            )

        return ordered, events
