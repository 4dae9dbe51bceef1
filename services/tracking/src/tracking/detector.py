"""Detector adapter: ultralytics YOLO output → pixel-space Detection values.

The tracker only ever sees list[Detection]. Callers go through
detect_or_empty() so a failed inference costs one frame and nothing else.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np
from ultralytics import YOLO

from assist_shared.events.schemas import BoundingBox, Detection
from assist_shared.logging import get_logger

from tracking.errors import DetectorUnavailable

log = get_logger(__name__)


class ObjectDetector(ABC):
    @abstractmethod
    def detect(self, frame: np.ndarray) -> list[Detection]:
        """Detect objects in one BGR frame.

        Raises:
            DetectorUnavailable: inference failed for this frame.
        """


def _parse_result(result) -> list[Detection]:
    """Convert one ultralytics Results object; class ids become label names."""
    boxes = result.boxes
    if boxes is None or len(boxes) == 0:
        return []

    corners = boxes.xyxy.cpu().numpy().astype(float)
    scores = boxes.conf.cpu().numpy().astype(float)
    class_ids = boxes.cls.cpu().numpy().astype(int)

    return [
        Detection(
            box=BoundingBox.from_xyxy(*map(float, xyxy)),
            label=str(result.names.get(int(class_id), int(class_id))),
            confidence=float(score),
        )
        for xyxy, score, class_id in zip(corners, scores, class_ids)
    ]


class YoloObjectDetector(ObjectDetector):
    """COCO object detector backed by an ultralytics YOLO checkpoint.

    Args:
        model_name: Checkpoint name or path; ultralytics downloads known names.
        device: Torch device string ("cpu", "cuda", "mps").
        confidence: Boxes scoring below this are discarded by the model.
        iou: NMS IoU threshold.
    """

    def __init__(
        self,
        model_name: str = "yolo11n.pt",
        device: str = "cpu",
        confidence: float = 0.5,
        iou: float = 0.7,
    ) -> None:
        self._model = YOLO(model_name)
        self._predict_args = {
            "conf": confidence,
            "iou": iou,
            "device": device,
            "verbose": False,
        }
        log.info("detector_ready", model=model_name, device=device, confidence=confidence)

    def detect(self, frame: np.ndarray) -> list[Detection]:
        try:
            results = self._model.predict(frame, **self._predict_args)
        except Exception as exc:
            raise DetectorUnavailable(f"inference failed: {exc}") from exc
        return [d for result in results for d in _parse_result(result)]


def detect_or_empty(detector: ObjectDetector, frame: np.ndarray) -> list[Detection]:
    """detector.detect(frame), or [] when the detector is unavailable."""
    try:
        return detector.detect(frame)
    except DetectorUnavailable as exc:
        log.warning("detector_unavailable", error=str(exc))
        return []
