"""Bounding-box math used for association and proximity estimation.

All boxes are ``BoundingBox`` (origin + size, pixel units). Functions are pure.
"""
from __future__ import annotations

import math

from assist_shared.events.schemas import BoundingBox

from tracking.errors import InvalidFrame, InvalidGeometry


def validate_box(box: BoundingBox) -> None:
    """Raise InvalidGeometry unless all coordinates are finite and sizes >= 0."""
    values = (box.origin_x, box.origin_y, box.width, box.height)
    if not all(math.isfinite(v) for v in values):
        raise InvalidGeometry(f"non-finite box coordinates: {values}")
    if box.width < 0 or box.height < 0:
        raise InvalidGeometry(
            f"negative box size: width={box.width}, height={box.height}"
        )


def area(box: BoundingBox) -> float:
    if box.width < 0 or box.height < 0:
        raise InvalidGeometry(
            f"negative box size: width={box.width}, height={box.height}"
        )
    return box.width * box.height


def shift_box(box: BoundingBox, dx: float, dy: float) -> BoundingBox:
    """Return a copy of ``box`` translated by (dx, dy)."""
    return box.model_copy(
        update={"origin_x": box.origin_x + dx, "origin_y": box.origin_y + dy}
    )


def intersection_over_union(a: BoundingBox, b: BoundingBox) -> float:
    """Overlap ratio of two boxes in [0, 1].

    Touching or disjoint boxes give 0.0, as do two zero-area boxes.
    """
    x_left = max(a.origin_x, b.origin_x)
    y_top = max(a.origin_y, b.origin_y)
    x_right = min(a.right, b.right)
    y_bottom = min(a.bottom, b.bottom)

    if x_right < x_left or y_bottom < y_top:
        return 0.0

    intersection = (x_right - x_left) * (y_bottom - y_top)
    union = area(a) + area(b) - intersection
    if union <= 0.0:
        return 0.0
    return intersection / union


def center_distance(a: BoundingBox, b: BoundingBox) -> float:
    ax, ay = a.center
    bx, by = b.center
    return math.hypot(bx - ax, by - ay)


def area_ratio(box: BoundingBox, frame_width: float, frame_height: float) -> float:
    """Fraction of the frame covered by ``box``; larger means closer.

    Raises:
        InvalidFrame: frame area is zero (or negative).
        InvalidGeometry: box has a negative size.
    """
    if frame_width <= 0 or frame_height <= 0:
        raise InvalidFrame(f"frame has no area: {frame_width}x{frame_height}")
    return area(box) / (frame_width * frame_height)
