"""
Geometric Eye-Metric Extractor

Pure per-frame measurements from FaceMesh landmarks:
- Eye Aspect Ratio (Soukupová & Čech 2016), averaged over 3 vertical lid pairs
- Iris centroid as pupil position
- Eye-box center/size from corner and lid landmarks
- Gaze direction as pupil offset from the eye-box center

Nothing here reads history; the same frame always yields the same geometry.
"""
from typing import Optional
import math

from ocular_screening.utils import get_logger
from ocular_screening.core.errors import DegenerateGeometryError
from .base import (
    EyeGeometry, EyeLandmarkIndices, FrameGeometry, LandmarkFrame,
    LEFT_EYE, RIGHT_EYE, centroid, distance,
)

logger = get_logger(__name__)

# Open-eye EAR used when the corner distance collapses to zero
DEFAULT_EAR = 0.3


def eye_aspect_ratio(frame: LandmarkFrame, eye: EyeLandmarkIndices) -> float:
    """
    Mean vertical lid distance over horizontal corner distance.

    Returns DEFAULT_EAR instead of dividing by zero.
    """
    horizontal = distance(frame.point(eye.outer_corner).xy, frame.point(eye.inner_corner).xy)
    verticals = [
        distance(frame.point(up).xy, frame.point(low).xy)
        for up, low in zip(eye.upper_lid, eye.lower_lid)
    ]
    if horizontal <= 0.0:
        logger.warning(
            "%s",
            DegenerateGeometryError(f"{eye.name} eye corners coincide; EAR fallback {DEFAULT_EAR}"),
        )
        return DEFAULT_EAR
    return (sum(verticals) / len(verticals)) / horizontal


def pupil_centroid(frame: LandmarkFrame, eye: EyeLandmarkIndices):
    """Mean of the iris landmarks."""
    return centroid([frame.point(i).xy for i in eye.iris])


def _axis_offset(value: float, center: float, extent: float, label: str) -> float:
    if extent <= 0.0:
        logger.debug("%s", DegenerateGeometryError(f"zero {label}; gaze offset fallback 0.0"))
        return 0.0
    return (value - center) / extent


class GeometryExtractor:
    """
    Maps one LandmarkFrame to FrameGeometry.

    Any failure (missing index, non-finite coordinate) yields None so the
    caller can treat the tick as a data gap.
    """

    def __init__(self, left_eye: EyeLandmarkIndices = LEFT_EYE, right_eye: EyeLandmarkIndices = RIGHT_EYE):
        self.left_eye = left_eye
        self.right_eye = right_eye
        self._extraction_count = 0
        self._failure_count = 0

    def extract(self, frame: Optional[LandmarkFrame]) -> Optional[FrameGeometry]:
        if frame is None:
            return None
        try:
            geometry = FrameGeometry(
                left=self.measure_eye(frame, self.left_eye),
                right=self.measure_eye(frame, self.right_eye),
            )
        except (IndexError, ValueError, TypeError, ZeroDivisionError) as e:
            self._failure_count += 1
            logger.warning(f"Eye geometry extraction failed: {type(e).__name__}: {e}")
            return None

        self._extraction_count += 1
        return geometry

    def measure_eye(self, frame: LandmarkFrame, eye: EyeLandmarkIndices) -> EyeGeometry:
        """Measure openness, pupil, eye box and gaze offset for one eye."""
        box_points = [frame.point(i).xy for i in eye.box_indices]
        iris_points = [frame.point(i).xy for i in eye.iris]
        for x, y in box_points + iris_points:
            if not (math.isfinite(x) and math.isfinite(y)):
                raise ValueError(f"{eye.name} eye has non-finite landmark coordinates")

        xs = [p[0] for p in box_points]
        ys = [p[1] for p in box_points]
        width = max(xs) - min(xs)
        height = max(ys) - min(ys)
        center = ((max(xs) + min(xs)) / 2.0, (max(ys) + min(ys)) / 2.0)

        pupil = centroid(iris_points)
        gaze = (
            _axis_offset(pupil[0], center[0], width, "eye width"),
            _axis_offset(pupil[1], center[1], height, "eye height"),
        )

        return EyeGeometry(
            openness=eye_aspect_ratio(frame, eye),
            pupil=pupil,
            center=center,
            width=width,
            height=height,
            gaze=gaze,
        )

    def get_status(self) -> dict:
        return {
            "extractions": self._extraction_count,
            "failures": self._failure_count,
        }
