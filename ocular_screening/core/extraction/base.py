"""
Landmark Data Structures

Immutable landmark frames as produced by an external FaceMesh-style detector,
the eye index sets used to read them, and per-frame geometric results.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple
import math

import numpy as np

Point2D = Tuple[float, float]


@dataclass(frozen=True)
class Landmark:
    """Single normalized 3D landmark (x, y, z in image space)."""
    x: float
    y: float
    z: float = 0.0

    @property
    def xy(self) -> Point2D:
        return (self.x, self.y)


class LandmarkFrame:
    """
    Ordered, immutable sequence of landmarks for one video frame.

    Accepts an (N, >=2) array, a sequence of (x, y[, z]) tuples, or objects
    exposing .x/.y/.z attributes (MediaPipe NormalizedLandmark).
    """

    __slots__ = ("_points",)

    def __init__(self, points: Iterable[Any]):
        self._points: Tuple[Landmark, ...] = tuple(self._coerce(p) for p in points)

    @staticmethod
    def _coerce(point: Any) -> Landmark:
        if isinstance(point, Landmark):
            return point
        if hasattr(point, "x") and hasattr(point, "y"):
            return Landmark(float(point.x), float(point.y), float(getattr(point, "z", 0.0)))
        values = list(point)
        z = float(values[2]) if len(values) > 2 else 0.0
        return Landmark(float(values[0]), float(values[1]), z)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "LandmarkFrame":
        """Build from an (N, 2+) numpy array; extra columns (visibility) are ignored."""
        array = np.asarray(array, dtype=float)
        if array.ndim != 2 or array.shape[1] < 2:
            raise ValueError(f"Expected (N, >=2) landmark array, got shape {array.shape}")
        return cls(array[:, :3] if array.shape[1] >= 3 else array)

    def point(self, index: int) -> Landmark:
        """Return landmark at index; negative indices are rejected."""
        if index < 0:
            raise IndexError(f"Landmark index {index} is negative")
        return self._points[index]

    def to_array(self) -> np.ndarray:
        return np.array([(p.x, p.y, p.z) for p in self._points], dtype=float)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self):
        return iter(self._points)

    def __repr__(self) -> str:
        return f"<LandmarkFrame(points={len(self._points)})>"


@dataclass(frozen=True)
class EyeLandmarkIndices:
    """FaceMesh indices needed for one eye (refine_landmarks=True for iris)."""
    name: str
    outer_corner: int
    inner_corner: int
    upper_lid: Tuple[int, ...]
    lower_lid: Tuple[int, ...]
    iris: Tuple[int, ...]

    def __post_init__(self):
        if len(self.upper_lid) != len(self.lower_lid):
            raise ValueError("Upper and lower lid index sets must pair up")
        if len(self.upper_lid) < 3:
            raise ValueError("At least 3 vertical lid pairs are required")

    @property
    def box_indices(self) -> Tuple[int, ...]:
        """Corner and lid points spanning the eye opening."""
        return (self.outer_corner, self.inner_corner) + self.upper_lid + self.lower_lid


# Lid pairs are ordered outer -> inner so upper_lid[i] sits above lower_lid[i]
LEFT_EYE = EyeLandmarkIndices(
    name="left",
    outer_corner=33,
    inner_corner=133,
    upper_lid=(160, 159, 158),
    lower_lid=(144, 145, 153),
    iris=(468, 469, 470, 471, 472),
)

RIGHT_EYE = EyeLandmarkIndices(
    name="right",
    outer_corner=263,
    inner_corner=362,
    upper_lid=(387, 386, 385),
    lower_lid=(373, 374, 380),
    iris=(473, 474, 475, 476, 477),
)

# FaceMesh with iris refinement
REQUIRED_LANDMARKS = 478


@dataclass(frozen=True)
class EyeGeometry:
    """Geometric measurements for one eye in a single frame."""
    openness: float
    pupil: Point2D
    center: Point2D
    width: float
    height: float
    gaze: Point2D


@dataclass(frozen=True)
class FrameGeometry:
    """History-independent geometry for both eyes."""
    left: EyeGeometry
    right: EyeGeometry

    @property
    def average_openness(self) -> float:
        return (self.left.openness + self.right.openness) / 2.0

    @property
    def asymmetry(self) -> float:
        return abs(self.left.openness - self.right.openness)

    @property
    def gaze_direction(self) -> Point2D:
        return (
            (self.left.gaze[0] + self.right.gaze[0]) / 2.0,
            (self.left.gaze[1] + self.right.gaze[1]) / 2.0,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "left_openness": self.left.openness,
            "right_openness": self.right.openness,
            "average_openness": self.average_openness,
            "asymmetry": self.asymmetry,
            "pupil_left": list(self.left.pupil),
            "pupil_right": list(self.right.pupil),
            "gaze_direction": list(self.gaze_direction),
        }


def distance(a: Point2D, b: Point2D) -> float:
    """Euclidean distance between two 2D points."""
    return math.hypot(a[0] - b[0], a[1] - b[1])


def centroid(points: Sequence[Point2D]) -> Optional[Point2D]:
    """Arithmetic mean of points, or None for an empty sequence."""
    if not points:
        return None
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return (sum(xs) / len(xs), sum(ys) / len(ys))
