#!/usr/bin/env python3
"""Run detection + proximity tracking over a video file.

Boxes are coloured by proximity tier and labelled with track ID, label and
motion; every announcement the alert gate fires is printed with its video time.

Usage:
    python scripts/run_video.py street.mp4 street_tracked.mp4

    # Live window instead of (or as well as) an output file:
    python scripts/run_video.py street.mp4 --show

    # On-screen thresholds (0.2 / 0.1) instead of the tracking ones:
    python scripts/run_video.py street.mp4 --show --proximity display
"""
from __future__ import annotations

import argparse
import sys
import time
from collections.abc import Iterator
from dataclasses import replace
from pathlib import Path

import cv2
import numpy as np

from assist_shared.events.schemas import ProximityTier, TrackedObject
from assist_shared.logging import configure_logging
from assist_shared.settings import settings

from tracking.config import build_config
from tracking.detector import YoloObjectDetector, detect_or_empty
from tracking.engine import ObjectTracker
from tracking.motion import PROXIMITY_PROFILES, proximity_thresholds

# BGR
_TIER_COLORS = {
    ProximityTier.VERY_CLOSE: (0, 0, 255),
    ProximityTier.GETTING_CLOSE: (0, 215, 255),
    ProximityTier.SAFE_DISTANCE: (60, 200, 60),
}
_WHITE = (255, 255, 255)
_FONT = cv2.FONT_HERSHEY_SIMPLEX


def draw_object(frame: np.ndarray, obj: TrackedObject) -> None:
    """Tinted box plus a two-line caption above it, drawn in place."""
    color = _TIER_COLORS[obj.proximity_tier]
    top_left = (int(obj.box.origin_x), int(obj.box.origin_y))
    bottom_right = (int(obj.box.right), int(obj.box.bottom))

    tint = frame.copy()
    cv2.rectangle(tint, top_left, bottom_right, color, cv2.FILLED)
    cv2.addWeighted(tint, 0.25, frame, 0.75, 0, dst=frame)
    cv2.rectangle(frame, top_left, bottom_right, color, 2)

    # Hershey fonts have no arrow glyphs, so motion is shown numerically
    if obj.is_moving:
        motion = f"{obj.speed:.0f}px/s @ {obj.direction_deg:.0f}deg"
    else:
        motion = "still"
    caption = (
        f"#{obj.track_id} {obj.label} {obj.confidence:.0%}",
        f"{obj.proximity_tier.value} | {motion}",
    )
    x, y = top_left
    for offset, text in zip((28, 8), caption):
        cv2.putText(frame, text, (x, max(y - offset, 14)), _FONT, 0.55, color, 2, cv2.LINE_AA)


def iter_frames(cap: cv2.VideoCapture) -> Iterator[np.ndarray]:
    while True:
        ok, frame = cap.read()
        if not ok:
            return
        yield frame


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Track objects and their proximity in a video")
    parser.add_argument("input", type=Path, help="Input video file")
    parser.add_argument("output", type=Path, nargs="?", help="Annotated output video (mp4)")
    parser.add_argument("--show", action="store_true", help="Display annotated frames live")
    parser.add_argument("--model", default=settings.yolo_model, help="YOLO checkpoint")
    parser.add_argument("--conf", type=float, default=settings.yolo_confidence)
    parser.add_argument("--device", default=settings.detector_device, help="cpu, cuda or mps")
    parser.add_argument(
        "--proximity",
        choices=sorted(PROXIMITY_PROFILES),
        default=settings.proximity_profile,
        help="Area-ratio thresholds: tracking = 0.15/0.08, display = 0.2/0.1",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    configure_logging("console", settings.log_level)

    if not args.input.exists():
        sys.exit(f"Input not found: {args.input}")
    cap = cv2.VideoCapture(str(args.input))
    if not cap.isOpened():
        sys.exit(f"Cannot open video: {args.input}")

    fps = cap.get(cv2.CAP_PROP_FPS) or 30.0
    width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
    height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
    interval_ms = 1000.0 / fps

    detector = YoloObjectDetector(
        model_name=args.model,
        device=args.device,
        confidence=args.conf,
        iou=settings.yolo_iou,
    )
    tracker = ObjectTracker(
        replace(
            build_config(settings),
            proximity=proximity_thresholds(args.proximity),
            default_frame_interval_ms=interval_ms,
        )
    )

    writer = None
    if args.output:
        writer = cv2.VideoWriter(
            str(args.output), cv2.VideoWriter_fourcc(*"mp4v"), fps, (width, height)
        )

    print(f"{args.input}: {width}x{height} @ {fps:.1f} fps, proximity={args.proximity}")

    frames = 0
    spoken = 0
    started = time.monotonic()
    try:
        for frame in iter_frames(cap):
            video_ms = frames * interval_ms
            result = tracker.update(detect_or_empty(detector, frame), width, height, video_ms)

            # Most urgent object last, so its box is drawn on top
            for obj in reversed(result.objects):
                draw_object(frame, obj)
            for event in result.announcements:
                spoken += 1
                print(f"  [{video_ms / 1000:7.2f}s] {event.phrase}")

            cv2.putText(
                frame,
                f"t={video_ms / 1000:.1f}s | {tracker.live_track_count} tracks | {spoken} spoken",
                (10, 28), _FONT, 0.8, _WHITE, 2, cv2.LINE_AA,
            )
            if writer:
                writer.write(frame)
            if args.show:
                cv2.imshow("Vision Assist", frame)
                if cv2.waitKey(1) & 0xFF == ord("q"):
                    break
            frames += 1
    finally:
        cap.release()
        if writer:
            writer.release()
        if args.show:
            cv2.destroyAllWindows()

    elapsed = time.monotonic() - started
    rate = frames / elapsed if elapsed > 0 else 0.0
    print(f"\n{frames} frames in {elapsed:.1f}s ({rate:.1f} fps), {spoken} announcements")
    if args.output:
        print(f"Saved {args.output}")


if __name__ == "__main__":
    main()
