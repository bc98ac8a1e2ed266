"""
Reference Profiles and Pattern Similarity

Aggregates a window of eye samples into nine session-level metrics, plus
the saccadic intrusion rate, and compares them against fixed reference profiles (normal, impaired-early,
impaired-advanced).
"""
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Sequence

import numpy as np

from ocular_screening.utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AggregatedMetrics:
    """Session-level eye-movement metrics over the current history window."""
    saccade_latency_ms: float
    smooth_pursuit_gain: float
    fixation_stability: float
    antisaccade_errors: float
    blink_rate: float
    saccade_velocity: float
    fixation_duration_ms: float
    gaze_stability: float
    pupil_movement_variance: float
    # Flagged saccades per second of window; not part of the reference profiles
    saccade_rate_hz: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {k: round(v, 4) for k, v in asdict(self).items()}


@dataclass(frozen=True)
class ReferenceProfile:
    """Named expected value for each aggregated metric."""
    name: str
    metrics: AggregatedMetrics
    description: str = ""


REFERENCE_PROFILES: Dict[str, ReferenceProfile] = {
    "normal": ReferenceProfile(
        name="normal",
        description="Typical healthy adult eye-movement pattern",
        metrics=AggregatedMetrics(
            saccade_latency_ms=160,
            smooth_pursuit_gain=0.92,
            fixation_stability=0.88,
            antisaccade_errors=0.12,
            blink_rate=0.25,
            saccade_velocity=45,
            fixation_duration_ms=320,
            gaze_stability=0.85,
            pupil_movement_variance=0.08,
        ),
    ),
    "impaired-early": ReferenceProfile(
        name="impaired-early",
        description="Early-stage impairment pattern",
        metrics=AggregatedMetrics(
            saccade_latency_ms=280,
            smooth_pursuit_gain=0.58,
            fixation_stability=0.38,
            antisaccade_errors=0.68,
            blink_rate=0.18,
            saccade_velocity=28,
            fixation_duration_ms=180,
            gaze_stability=0.45,
            pupil_movement_variance=0.25,
        ),
    ),
    "impaired-advanced": ReferenceProfile(
        name="impaired-advanced",
        description="Advanced impairment pattern",
        metrics=AggregatedMetrics(
            saccade_latency_ms=380,
            smooth_pursuit_gain=0.32,
            fixation_stability=0.18,
            antisaccade_errors=0.82,
            blink_rate=0.12,
            saccade_velocity=18,
            fixation_duration_ms=90,
            gaze_stability=0.22,
            pupil_movement_variance=0.42,
        ),
    ),
}

# Pupil-movement variance is reported but not compared
SIMILARITY_WEIGHTS: Dict[str, float] = {
    "saccade_latency_ms": 0.18,
    "smooth_pursuit_gain": 0.16,
    "fixation_stability": 0.15,
    "antisaccade_errors": 0.14,
    "blink_rate": 0.08,
    "saccade_velocity": 0.12,
    "fixation_duration_ms": 0.09,
    "gaze_stability": 0.08,
}

SIMILARITY_EPSILON = 0.001


@dataclass(frozen=True)
class AggregationConfig:
    """Thresholds and fallbacks used when aggregating a sample window."""
    onset_movement: float = 0.02
    onset_quiet_movement: float = 0.01
    onset_latency_ms: float = 100.0
    min_samples_for_latency: int = 3
    default_latency_ms: float = 200.0
    pursuit_movement_factor: float = 5.0
    pursuit_floor: float = 0.2
    fixation_movement: float = 0.005
    fixation_reference_ms: float = 300.0
    fixation_stability_floor: float = 0.1
    asymmetry_error_factor: float = 8.0
    default_velocity: float = 40.0
    variance_scale: float = 100.0
    default_variance: float = 0.1
    frame_interval_s: float = 1.0 / 60.0


def _saccade_latency(movements: np.ndarray, config: AggregationConfig) -> float:
    if len(movements) < config.min_samples_for_latency:
        return config.default_latency_ms
    current = movements[2:]
    previous = movements[1:-1]
    onsets = int(np.count_nonzero((current > config.onset_movement) & (previous < config.onset_quiet_movement)))
    # Onset timing is not measured; every onset contributes the nominal latency
    return config.onset_latency_ms if onsets else config.default_latency_ms


def aggregate_metrics(samples: Sequence[Any], config: Optional[AggregationConfig] = None) -> AggregatedMetrics:
    """
    Reduce a non-empty, oldest-first window of EyeSample-like objects.

    Raises:
        ValueError: if samples is empty
    """
    if not samples:
        raise ValueError("Cannot aggregate an empty sample window")
    c = config or AggregationConfig()

    n = len(samples)
    movement = np.array([s.movement for s in samples], dtype=float)
    stability = np.array([s.gaze_stability for s in samples], dtype=float)
    fixation = np.array([s.fixation_duration_ms for s in samples], dtype=float)
    asymmetry = np.array([s.asymmetry for s in samples], dtype=float)
    velocity = np.array([s.saccade_velocity for s in samples], dtype=float)
    blinks = sum(1 for s in samples if s.is_blink)
    saccades = sum(1 for s in samples if s.saccade_detected)

    pursuit = float(np.clip(stability.mean() * (1 - movement.mean() * c.pursuit_movement_factor), c.pursuit_floor, 1.0))

    fixating = movement < c.fixation_movement
    fixation_ratio = fixating.sum() / n
    mean_fixation_ms = float(fixation[fixating].mean()) if fixating.any() else 0.0
    fixation_stability = float(np.clip(
        fixation_ratio * (mean_fixation_ms / c.fixation_reference_ms), c.fixation_stability_floor, 1.0
    ))

    moving = velocity[velocity > 0]
    variance = min(1.0, float(np.var(movement)) * c.variance_scale) if n >= 2 else c.default_variance

    return AggregatedMetrics(
        saccade_latency_ms=_saccade_latency(movement, c),
        smooth_pursuit_gain=pursuit,
        fixation_stability=fixation_stability,
        antisaccade_errors=min(1.0, float(asymmetry.mean()) * c.asymmetry_error_factor),
        blink_rate=min(1.0, blinks / n),
        saccade_velocity=float(moving.mean()) if moving.size else c.default_velocity,
        fixation_duration_ms=float(fixation.mean()),
        gaze_stability=float(stability.mean()),
        pupil_movement_variance=variance,
        saccade_rate_hz=saccades / (n * c.frame_interval_s),
    )


def pattern_similarity(metrics: AggregatedMetrics, profile: ReferenceProfile) -> float:
    """Weighted closeness in [0, 1]; 1 means every compared metric matches."""
    similarity = 0.0
    total_weight = 0.0
    for name, weight in SIMILARITY_WEIGHTS.items():
        measured = getattr(metrics, name)
        expected = getattr(profile.metrics, name)
        normalized_diff = abs(measured - expected) / (abs(expected) + SIMILARITY_EPSILON)
        similarity += (1.0 - min(normalized_diff, 1.0)) * weight
        total_weight += weight
    return similarity / total_weight if total_weight > 0 else 0.0


def profile_similarities(metrics: AggregatedMetrics) -> Dict[str, float]:
    """Similarity to every reference profile, keyed by profile name."""
    return {name: pattern_similarity(metrics, profile) for name, profile in REFERENCE_PROFILES.items()}
