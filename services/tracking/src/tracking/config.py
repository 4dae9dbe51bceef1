"""Tracking service configuration."""
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace

from assist_shared.events.publisher import GROUP_TRACKING

from tracking.alert_policy import DEFAULT_ALERT_POLICY, AlertPolicy, load_alert_policy
from tracking.motion import TRACKING_THRESHOLDS, ProximityThresholds, proximity_thresholds


@dataclass(frozen=True)
class TrackingConfig:
    """Tunables for one tracker instance plus the stream loop around it."""

    # Association
    iou_threshold: float = 0.3
    distance_threshold_px: float = 50.0
    max_prediction_frames: int = 3

    # Track lifecycle
    cleanup_delay_ms: float = 1500.0
    history_size: int = 30

    # Motion / proximity
    min_speed_threshold: float = 5.0   # px/s
    proximity: ProximityThresholds = TRACKING_THRESHOLDS

    # Alert gate
    alert_policy: AlertPolicy = DEFAULT_ALERT_POLICY

    # Used when a detection frame does not carry its own interval
    default_frame_interval_ms: float = 1000.0 / 15

    # Stream settings
    camera_ids: list[str] = field(default_factory=list)
    redis_url: str = "redis://localhost:6379/0"
    consumer_group: str = GROUP_TRACKING
    consumer_name: str = "tracking-0"
    read_batch: int = 4
    block_ms: int = 500
    stream_maxlen: int = 1000

    # Throughput logging interval (frames)
    log_interval: int = 100


def build_config(settings) -> TrackingConfig:
    """Build TrackingConfig from shared assist_shared.settings.Settings.

    The alert policy comes from ``settings.alert_policy_path`` when set;
    the announce cooldown always comes from settings.
    """
    if settings.alert_policy_path:
        policy = load_alert_policy(
            settings.alert_policy_path, cooldown_ms=settings.announce_cooldown_ms
        )
    else:
        policy = replace(DEFAULT_ALERT_POLICY, cooldown_ms=settings.announce_cooldown_ms)

    consumer_name = os.environ.get("TRACKING_CONSUMER_NAME", "tracking-0")

    return TrackingConfig(
        iou_threshold=settings.track_iou_threshold,
        distance_threshold_px=settings.track_distance_threshold_px,
        max_prediction_frames=settings.track_max_prediction_frames,
        cleanup_delay_ms=settings.track_cleanup_delay_ms,
        history_size=settings.track_history_size,
        min_speed_threshold=settings.min_speed_threshold,
        proximity=proximity_thresholds(settings.proximity_profile),
        alert_policy=policy,
        default_frame_interval_ms=settings.frame_interval_ms,
        camera_ids=settings.camera_id_list,
        redis_url=settings.redis_url,
        consumer_name=consumer_name,
    )
