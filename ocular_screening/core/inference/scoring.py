"""
Cognitive Scoring Function

Per-frame 0-100 score from eye openness, asymmetry, gaze stability,
pupil movement, saccade velocity and fixation duration.
"""
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional
import math

import numpy as np

from ocular_screening.utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScoringWeights:
    """Coefficients of the per-frame score."""
    baseline: float = 70.0
    expected_openness: float = 0.25
    openness_coef: float = 100.0
    asymmetry_penalty: float = 300.0
    stability_bonus: float = 15.0
    movement_penalty: float = 200.0
    velocity_soft_ceiling: float = 600.0  # px/s
    velocity_penalty: float = 0.01        # per px/s above the ceiling
    fixation_bonus: float = 0.005         # per ms

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _term(value: float) -> float:
    """Non-finite inputs contribute nothing."""
    return value if math.isfinite(value) else 0.0


class CognitiveScorer:
    """Weighted linear score clamped to [0, 100]."""

    def __init__(self, weights: Optional[ScoringWeights] = None):
        self.weights = weights or ScoringWeights()

    def score(
        self,
        average_openness: float,
        asymmetry: float,
        gaze_stability: float,
        movement: float,
        saccade_velocity: float,
        fixation_duration_ms: float,
    ) -> float:
        w = self.weights
        velocity = _term(saccade_velocity)
        openness_term = _term(w.openness_coef * (average_openness - w.expected_openness))

        total = (
            w.baseline
            + openness_term
            - w.asymmetry_penalty * _term(asymmetry)
            + w.stability_bonus * _term(gaze_stability)
            - w.movement_penalty * _term(movement)
            - w.velocity_penalty * max(0.0, velocity - w.velocity_soft_ceiling)
            + w.fixation_bonus * _term(fixation_duration_ms)
        )
        return float(np.clip(total, 0.0, 100.0))

    def score_sample(self, sample: Any) -> float:
        """Score any object exposing the EyeSample feature attributes."""
        return self.score(
            sample.average_openness,
            sample.asymmetry,
            sample.gaze_stability,
            sample.movement,
            sample.saccade_velocity,
            sample.fixation_duration_ms,
        )
