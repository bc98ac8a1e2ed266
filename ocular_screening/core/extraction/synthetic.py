"""
Synthetic landmark frames.

Builds 478-point FaceMesh-shaped frames whose eye geometry is known exactly:
EAR equals the requested openness and the per-eye gaze offset equals the
requested gaze. Used by the simulation script and the test suite.
"""
from typing import Iterator, List, Optional, Tuple

import numpy as np

from .base import EyeLandmarkIndices, LandmarkFrame, LEFT_EYE, RIGHT_EYE, REQUIRED_LANDMARKS

EYE_WIDTH = 0.1
LEFT_EYE_CENTER = (0.35, 0.45)
RIGHT_EYE_CENTER = (0.65, 0.45)
IRIS_RADIUS = 0.01


def _place_eye(
    points: np.ndarray,
    eye: EyeLandmarkIndices,
    center: Tuple[float, float],
    openness: float,
    gaze: Tuple[float, float],
) -> None:
    cx, cy = center
    width = EYE_WIDTH
    height = openness * width

    points[eye.outer_corner, :2] = (cx - width / 2, cy)
    points[eye.inner_corner, :2] = (cx + width / 2, cy)

    lid_xs = (cx - width / 4, cx, cx + width / 4)
    for x, up, low in zip(lid_xs, eye.upper_lid, eye.lower_lid):
        points[up, :2] = (x, cy - height / 2)
        points[low, :2] = (x, cy + height / 2)

    px = cx + gaze[0] * width
    py = cy + gaze[1] * height
    # Iris center plus four rim points; their mean is the pupil
    offsets = [(0.0, 0.0), (IRIS_RADIUS, 0.0), (0.0, -IRIS_RADIUS), (-IRIS_RADIUS, 0.0), (0.0, IRIS_RADIUS)]
    for index, (dx, dy) in zip(eye.iris, offsets):
        points[index, :2] = (px + dx, py + dy)


def make_landmarks(
    left_openness: float = 0.3,
    right_openness: Optional[float] = None,
    gaze: Tuple[float, float] = (0.0, 0.0),
    head_offset: Tuple[float, float] = (0.0, 0.0),
) -> np.ndarray:
    """Return a (478, 3) landmark array with the requested eye state."""
    if right_openness is None:
        right_openness = left_openness

    points = np.full((REQUIRED_LANDMARKS, 3), 0.5, dtype=float)
    points[:, 2] = 0.0

    ox, oy = head_offset
    _place_eye(points, LEFT_EYE, (LEFT_EYE_CENTER[0] + ox, LEFT_EYE_CENTER[1] + oy), left_openness, gaze)
    _place_eye(points, RIGHT_EYE, (RIGHT_EYE_CENTER[0] + ox, RIGHT_EYE_CENTER[1] + oy), right_openness, gaze)
    return points


def make_frame(
    left_openness: float = 0.3,
    right_openness: Optional[float] = None,
    gaze: Tuple[float, float] = (0.0, 0.0),
    head_offset: Tuple[float, float] = (0.0, 0.0),
) -> LandmarkFrame:
    """LandmarkFrame variant of make_landmarks()."""
    return LandmarkFrame.from_array(make_landmarks(left_openness, right_openness, gaze, head_offset))


def stable_sequence(count: int, openness: float = 0.3) -> Iterator[LandmarkFrame]:
    """Constant open eyes, centered gaze, no motion."""
    frame = make_frame(openness, openness, (0.0, 0.0))
    for _ in range(count):
        yield frame


def erratic_sequence(count: int) -> Iterator[LandmarkFrame]:
    """
    Alternating extreme gaze with out-of-phase eye openness.

    Every frame moves the pupils far enough to exceed the saccade thresholds.
    """
    for i in range(count):
        if i % 2 == 0:
            yield make_frame(0.1, 0.4, (-0.25, -0.2))
        else:
            yield make_frame(0.4, 0.1, (0.25, 0.2))


def noisy_sequence(count: int, seed: int = 0, jitter: float = 0.002) -> List[LandmarkFrame]:
    """Open eyes with small seeded gaze jitter, for demo runs."""
    rng = np.random.default_rng(seed)
    frames = []
    for _ in range(count):
        gx, gy = rng.normal(0.0, jitter * 10, size=2)
        openness = float(np.clip(rng.normal(0.28, 0.01), 0.05, 0.5))
        frames.append(make_frame(openness, openness, (float(gx), float(gy))))
    return frames


def random_gaze_sequence(count: int, seed: int = 0, every_other: bool = False) -> List[LandmarkFrame]:
    """
    Both eyes opening and closing together (EAR 0.1 / 0.4) while the gaze
    jumps to a seeded random horizontal position.

    The jump alternates sides so each one is at least 0.3 gaze units. With
    every_other=True the gaze is held on odd frames.
    """
    rng = np.random.default_rng(seed)
    frames = []
    gaze = (0.0, 0.0)
    jumps = 0
    for i in range(count):
        if not every_other or i % 2 == 0:
            side = 1.0 if jumps % 2 == 0 else -1.0
            gaze = (side * float(rng.uniform(0.15, 0.3)), 0.0)
            jumps += 1
        openness = 0.1 if i % 2 == 0 else 0.4
        frames.append(make_frame(openness, openness, gaze))
    return frames
