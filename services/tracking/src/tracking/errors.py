"""Error kinds raised by the tracker and its detector adapter.

None of these are fatal to the service: an invalid box costs one detection,
an invalid frame or an unavailable detector costs one frame.
"""
from __future__ import annotations


class TrackingError(RuntimeError):
    pass


class InvalidGeometry(TrackingError):
    """A bounding box has a negative (or non-finite) width or height."""


class InvalidFrame(TrackingError):
    """Frame dimensions or frame interval cannot be used for a tracking pass."""


class DetectorUnavailable(TrackingError):
    """The external detector failed or timed out for this frame."""
