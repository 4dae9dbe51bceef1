"""Alert policy: which objects are worth announcing, and how often.

Important labels come in two priority tiers: hazards that move (people,
vehicles, animals) rank above static obstacles (furniture, doors, stairs).
Everything else ranks last and is only announced when it is large in frame.

Defaults are built in; a YAML file can replace the label tiers and the
area-ratio override (see data/alert_policy.yaml).
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from assist_shared.logging import get_logger

log = get_logger(__name__)

HAZARD_LABELS: frozenset[str] = frozenset({
    "person", "car", "truck", "bus", "motorcycle", "bicycle", "dog",
})
OBSTACLE_LABELS: frozenset[str] = frozenset({
    "chair", "couch", "bed", "toilet", "door", "stairs",
})
IMPORTANT_LABELS: frozenset[str] = HAZARD_LABELS | OBSTACLE_LABELS

PRIORITY_HAZARD = 0
PRIORITY_OBSTACLE = 1
PRIORITY_OTHER = 2


@dataclass(frozen=True)
class AlertPolicy:
    hazard_labels: frozenset[str] = HAZARD_LABELS
    obstacle_labels: frozenset[str] = OBSTACLE_LABELS
    importance_area_ratio: float = 0.1   # any label this large is announced
    cooldown_ms: float = 3000.0          # per label, shared by all its instances

    def is_important(self, label: str) -> bool:
        return label in self.hazard_labels or label in self.obstacle_labels

    def priority(self, label: str) -> int:
        """Lower is more urgent."""
        if label in self.hazard_labels:
            return PRIORITY_HAZARD
        if label in self.obstacle_labels:
            return PRIORITY_OBSTACLE
        return PRIORITY_OTHER

    def is_eligible(self, label: str, area_ratio: float) -> bool:
        return self.is_important(label) or area_ratio > self.importance_area_ratio


DEFAULT_ALERT_POLICY = AlertPolicy()


def _labels(entry: dict, key: str, default: frozenset[str]) -> frozenset[str]:
    labels = entry.get(key)
    if labels is None:
        return default
    return frozenset(str(label) for label in labels)


def load_alert_policy(path: str | Path, cooldown_ms: float | None = None) -> AlertPolicy:
    """Load an AlertPolicy from YAML.

    Keys missing from the file keep their built-in defaults. ``cooldown_ms``,
    when given, comes from process settings rather than the file.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    entry = data.get("alert_policy", {})

    policy = AlertPolicy(
        hazard_labels=_labels(entry, "hazard_labels", HAZARD_LABELS),
        obstacle_labels=_labels(entry, "obstacle_labels", OBSTACLE_LABELS),
        importance_area_ratio=float(
            entry.get("importance_area_ratio", DEFAULT_ALERT_POLICY.importance_area_ratio)
        ),
        cooldown_ms=(
            float(cooldown_ms)
            if cooldown_ms is not None
            else DEFAULT_ALERT_POLICY.cooldown_ms
        ),
    )
    log.info(
        "alert_policy_loaded",
        path=str(path),
        hazard_labels=sorted(policy.hazard_labels),
        obstacle_labels=sorted(policy.obstacle_labels),
        importance_area_ratio=policy.importance_area_ratio,
    )
    return policy
