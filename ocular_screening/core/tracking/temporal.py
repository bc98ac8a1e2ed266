"""
Temporal Feature Tracker

Derives history-dependent features from the current frame geometry and the
bounded sample history:
- pupil movement and saccade velocity
- gaze stability over a short window
- fixation duration (newest-first run of low-motion samples)
- screen-space gaze, raw or calibrated

Velocity uses a fixed nominal frame interval rather than measured time.
"""
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Optional, Sequence

import numpy as np

from ocular_screening.config import Settings, get_settings
from ocular_screening.utils import get_logger, finite_or
from ocular_screening.core.errors import CalibrationError
from ocular_screening.core.extraction.base import FrameGeometry, Point2D, distance

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScreenGaze:
    """Gaze mapped to normalized screen coordinates."""
    x: float
    y: float
    quadrant: str = "center"

    def to_dict(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y, "quadrant": self.quadrant}


@dataclass(frozen=True)
class CalibrationState:
    """Gaze offset that maps to screen center, plus the offset mapped to the edge."""
    center: Point2D
    range: float

    def to_dict(self) -> Dict[str, Any]:
        return {"center": list(self.center), "range": self.range}


@dataclass(frozen=True)
class EyeSample:
    """
    One processed frame.

    Every field is a function of the current frame and the bounded history
    that preceded it.
    """
    frame_index: int
    timestamp_s: float
    face_detected: bool
    confidence: float
    left_openness: float
    right_openness: float
    average_openness: float
    asymmetry: float
    pupil_left: Point2D
    pupil_right: Point2D
    gaze_direction: Point2D
    screen_gaze: ScreenGaze
    movement: float = 0.0
    saccade_velocity: float = 0.0
    is_blink: bool = False
    saccade_detected: bool = False
    is_fixation: bool = False
    gaze_stability: float = 0.8
    fixation_duration_ms: float = 0.0
    cognitive_score: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["pupil_left"] = list(self.pupil_left)
        data["pupil_right"] = list(self.pupil_right)
        data["gaze_direction"] = list(self.gaze_direction)
        return data


@dataclass(frozen=True)
class TemporalFeatures:
    """History-dependent features for the current frame."""
    movement: float
    saccade_velocity: float
    gaze_stability: float
    fixation_duration_ms: float
    screen_gaze: ScreenGaze = field(default_factory=lambda: ScreenGaze(0.5, 0.5))


def classify_quadrant(x: float, y: float) -> str:
    """Label a screen point by the 0.4 / 0.6 bands on each axis."""
    horizontal = "left" if x < 0.4 else "right" if x > 0.6 else ""
    vertical = "top" if y < 0.4 else "bottom" if y > 0.6 else ""
    if horizontal and vertical:
        return f"{vertical}-{horizontal}"
    return vertical or horizontal or "center"


class TemporalFeatureTracker:
    """Computes movement, velocity, stability, fixation and screen gaze."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._calibration: Optional[CalibrationState] = None

    @property
    def calibration(self) -> Optional[CalibrationState]:
        return self._calibration

    def calibrate(self, gaze_direction: Optional[Point2D]) -> CalibrationState:
        """Take gaze_direction as the screen center from now on."""
        if gaze_direction is None:
            raise CalibrationError("No gaze sample available for calibration")
        gx, gy = gaze_direction
        if not (np.isfinite(gx) and np.isfinite(gy)):
            raise CalibrationError(f"Non-finite gaze sample {gaze_direction}")
        self._calibration = CalibrationState(center=(float(gx), float(gy)), range=self.settings.calibration_range)
        logger.info(f"Gaze calibrated at center=({gx:.4f}, {gy:.4f})")
        return self._calibration

    def reset(self) -> None:
        self._calibration = None

    def compute(self, geometry: FrameGeometry, history: Sequence[Any]) -> TemporalFeatures:
        """
        Features for `geometry` given the oldest-first history of prior samples.

        Only face-detected samples are expected in `history`.
        """
        previous = history[-1] if history else None
        movement = self.movement(geometry, previous)
        velocity = self.saccade_velocity(movement)
        gaze = geometry.gaze_direction

        return TemporalFeatures(
            movement=movement,
            saccade_velocity=velocity,
            gaze_stability=self.gaze_stability(gaze, history),
            fixation_duration_ms=self.fixation_duration_ms(movement, history),
            screen_gaze=self.screen_gaze(gaze),
        )

    def movement(self, geometry: FrameGeometry, previous: Optional[Any]) -> float:
        """Mean pupil displacement across both eyes, 0 without a prior sample."""
        if previous is None:
            return 0.0
        left = distance(geometry.left.pupil, previous.pupil_left)
        right = distance(geometry.right.pupil, previous.pupil_right)
        return finite_or((left + right) / 2.0)

    def saccade_velocity(self, movement: float) -> float:
        """Pixel-equivalent speed assuming the nominal frame interval."""
        s = self.settings
        return movement * s.reference_frame_width_px / s.frame_interval_s

    def gaze_stability(self, gaze: Point2D, history: Sequence[Any]) -> float:
        s = self.settings
        prior = [sample.gaze_direction for sample in history[-(s.gaze_stability_window - 1):]] \
            if s.gaze_stability_window > 1 else []
        window = prior + [gaze]
        if len(window) < s.gaze_stability_min_samples:
            return s.gaze_stability_default

        points = np.asarray(window, dtype=float)
        variance = float(np.var(points[:, 0]) + np.var(points[:, 1]))
        variance = finite_or(variance, default=s.gaze_variance_normalizer)
        return 1.0 - min(variance / s.gaze_variance_normalizer, 1.0)

    def fixation_duration_ms(self, movement: float, history: Sequence[Any]) -> float:
        """Length of the current low-motion run, current frame first."""
        threshold = self.settings.fixation_movement_threshold
        if movement >= threshold:
            return 0.0

        count = 1
        for sample in reversed(history):
            if sample.movement >= threshold:
                break
            count += 1
        return count * self.settings.frame_interval_s * 1000.0

    def screen_gaze(self, gaze: Point2D) -> ScreenGaze:
        gx, gy = gaze
        if self._calibration is None:
            gain = self.settings.screen_gaze_gain
            x = 0.5 + gx * gain
            y = 0.5 + gy * gain
        else:
            cx, cy = self._calibration.center
            r = self._calibration.range
            x = 0.5 + (gx - cx) / r * 0.5
            y = 0.5 + (gy - cy) / r * 0.5

        x = float(np.clip(finite_or(x, 0.5), 0.0, 1.0))
        y = float(np.clip(finite_or(y, 0.5), 0.0, 1.0))
        return ScreenGaze(x=x, y=y, quadrant=classify_quadrant(x, y))
