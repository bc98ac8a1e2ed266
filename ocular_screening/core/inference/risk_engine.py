"""
Risk Classifier Module

Turns a window of eye samples into a CognitiveAssessment:
aggregated metrics -> one-sided penalty risk score -> category and
confidence -> optional escalation from a discrete saccadic test ->
biomarker impairments -> recommendations.

Screening indicators only; not a diagnosis.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple
from enum import Enum

import numpy as np

from ocular_screening.config import Settings, get_settings
from ocular_screening.utils import get_logger
from ocular_screening.core.errors import InsufficientHistoryError
from .patterns import AggregatedMetrics, AggregationConfig, aggregate_metrics, profile_similarities
from .recommendations import generate_recommendations

logger = get_logger(__name__)

INSUFFICIENT_DATA_MESSAGE = "Insufficient data for analysis"
ANALYSIS_ERROR_MESSAGE = "Analysis error"


class RiskCategory(str, Enum):
    """Screening risk categories."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    def escalate(self) -> "RiskCategory":
        """One level up; HIGH stays HIGH."""
        if self is RiskCategory.LOW:
            return RiskCategory.MEDIUM
        return RiskCategory.HIGH


@dataclass(frozen=True)
class BiomarkerImpairments:
    """Impairment percentages (0-100) and the overall cognitive score."""
    saccade: float = 0.0
    pursuit: float = 0.0
    fixation: float = 0.0
    velocity: float = 0.0
    overall_score: float = 75.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "saccade_impairment": round(self.saccade, 2),
            "pursuit_impairment": round(self.pursuit, 2),
            "fixation_impairment": round(self.fixation, 2),
            "velocity_impairment": round(self.velocity, 2),
            "overall_cognitive_score": round(self.overall_score, 2),
        }


@dataclass(frozen=True)
class CognitiveAssessment:
    """Immutable result of one classification run."""
    risk_category: RiskCategory
    confidence: float
    biomarkers: BiomarkerImpairments
    recommendations: Tuple[str, ...]
    metrics: Optional[AggregatedMetrics] = None
    risk_score: float = 0.0
    profile_similarity: Dict[str, float] = field(default_factory=dict)
    test_result_applied: bool = False
    is_default: bool = False
    sample_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "risk_category": self.risk_category.value,
            "confidence": round(self.confidence, 3),
            "biomarkers": self.biomarkers.to_dict(),
            "recommendations": list(self.recommendations),
            "metrics": self.metrics.to_dict() if self.metrics else None,
            "risk_score": round(self.risk_score, 4),
            "profile_similarity": {k: round(v, 4) for k, v in self.profile_similarity.items()},
            "test_result_applied": self.test_result_applied,
            "is_default": self.is_default,
            "sample_count": self.sample_count,
        }


def default_assessment(message: str = INSUFFICIENT_DATA_MESSAGE, sample_count: int = 0) -> CognitiveAssessment:
    """Fixed low-confidence result used when no real analysis is possible."""
    return CognitiveAssessment(
        risk_category=RiskCategory.LOW,
        confidence=0.3,
        biomarkers=BiomarkerImpairments(),
        recommendations=(message,),
        is_default=True,
        sample_count=sample_count,
    )


@dataclass(frozen=True)
class ClassifierConfig:
    """Penalty thresholds and weights (weights sum to 1), category bands and test rules."""
    min_samples: Optional[int] = None  # None -> settings.min_history_for_assessment

    latency_threshold_ms: float = 250.0
    latency_span_ms: float = 200.0
    latency_weight: float = 0.20
    pursuit_threshold: float = 0.7
    pursuit_weight: float = 0.18
    fixation_threshold: float = 0.6
    fixation_weight: float = 0.16
    antisaccade_weight: float = 0.14
    velocity_threshold: float = 35.0
    velocity_weight: float = 0.12
    gaze_threshold: float = 0.6
    gaze_weight: float = 0.10
    variance_weight: float = 0.10
    # Saccadic intrusions, applied on top of the weighted metric penalties
    intrusion_threshold_hz: float = 2.0
    intrusion_span_hz: float = 4.0
    intrusion_weight: float = 0.15

    high_threshold: float = 0.7
    medium_threshold: float = 0.4
    min_confidence: float = 0.3
    max_confidence: float = 0.95

    test_latency_threshold_ms: float = 320.0
    test_latency_boost: float = 0.10
    test_accuracy_floor: float = 70.0
    test_accuracy_boost: float = 0.05

    saccade_scale_ms: float = 400.0
    pursuit_scale: float = 0.8
    fixation_scale: float = 0.9
    velocity_reference: float = 40.0
    overall_weights: Tuple[float, float, float, float] = (0.30, 0.25, 0.25, 0.20)


class RiskClassifier:
    """
    Rule-based classifier over the rolling sample history.

    Never raises: too little history or an internal failure both produce the
    default assessment with an explanatory recommendation.
    """

    def __init__(
        self,
        config: Optional[ClassifierConfig] = None,
        aggregation: Optional[AggregationConfig] = None,
        settings: Optional[Settings] = None,
    ):
        self.config = config or ClassifierConfig()
        settings = settings or get_settings()
        self.aggregation = aggregation or AggregationConfig(frame_interval_s=settings.frame_interval_s)
        self.min_samples = self.config.min_samples or settings.min_history_for_assessment
        logger.debug(f"RiskClassifier initialized (min_samples={self.min_samples})")

    def classify(self, samples: Sequence[Any], test_result: Optional[Any] = None) -> CognitiveAssessment:
        """
        Assess an oldest-first window of EyeSamples.

        Args:
            samples: face-detected samples from the rolling history
            test_result: optional SaccadicTestResult, used for escalation only
        """
        n = len(samples)
        try:
            self.require_history(n)
        except InsufficientHistoryError as e:
            logger.debug(f"Default assessment: {e}")
            return default_assessment(INSUFFICIENT_DATA_MESSAGE, sample_count=n)

        try:
            metrics = aggregate_metrics(samples, self.aggregation)
            similarity = profile_similarities(metrics)
            score = self.risk_score(metrics)
            category = self.categorize(score)
            confidence = self.confidence_for(category, score)

            applied = False
            if test_result is not None:
                category, confidence, applied = self.apply_test_result(category, confidence, test_result)

            biomarkers = self.biomarkers(metrics)
            recommendations = generate_recommendations(category.value, biomarkers)
        except (ValueError, TypeError, AttributeError, ArithmeticError, KeyError) as e:
            logger.warning(f"Classification failed, returning default: {type(e).__name__}: {e}")
            return default_assessment(ANALYSIS_ERROR_MESSAGE, sample_count=n)

        return CognitiveAssessment(
            risk_category=category,
            confidence=confidence,
            biomarkers=biomarkers,
            recommendations=tuple(recommendations),
            metrics=metrics,
            risk_score=score,
            profile_similarity=similarity,
            test_result_applied=applied,
            sample_count=n,
        )

    def require_history(self, available: int) -> None:
        if available < self.min_samples:
            raise InsufficientHistoryError(available, self.min_samples)

    def risk_score(self, metrics: AggregatedMetrics) -> float:
        """Sum of one-sided penalties, clamped to [0, 1]."""
        c = self.config
        score = 0.0

        if metrics.saccade_latency_ms > c.latency_threshold_ms:
            score += (metrics.saccade_latency_ms - c.latency_threshold_ms) / c.latency_span_ms * c.latency_weight
        if metrics.smooth_pursuit_gain < c.pursuit_threshold:
            score += (c.pursuit_threshold - metrics.smooth_pursuit_gain) / c.pursuit_threshold * c.pursuit_weight
        if metrics.fixation_stability < c.fixation_threshold:
            score += (c.fixation_threshold - metrics.fixation_stability) / c.fixation_threshold * c.fixation_weight

        score += metrics.antisaccade_errors * c.antisaccade_weight

        if metrics.saccade_velocity < c.velocity_threshold:
            score += (c.velocity_threshold - metrics.saccade_velocity) / c.velocity_threshold * c.velocity_weight
        if metrics.gaze_stability < c.gaze_threshold:
            score += (c.gaze_threshold - metrics.gaze_stability) / c.gaze_threshold * c.gaze_weight

        score += metrics.pupil_movement_variance * c.variance_weight
        if metrics.saccade_rate_hz > c.intrusion_threshold_hz:
            excess = (metrics.saccade_rate_hz - c.intrusion_threshold_hz) / c.intrusion_span_hz
            score += min(excess, 1.0) * c.intrusion_weight
        return float(np.clip(score, 0.0, 1.0))

    def categorize(self, score: float) -> RiskCategory:
        if score >= self.config.high_threshold:
            return RiskCategory.HIGH
        if score >= self.config.medium_threshold:
            return RiskCategory.MEDIUM
        return RiskCategory.LOW

    def confidence_for(self, category: RiskCategory, score: float) -> float:
        c = self.config
        if category is RiskCategory.HIGH:
            confidence = min(c.max_confidence, 0.8 + (score - c.high_threshold) * 0.5)
        elif category is RiskCategory.MEDIUM:
            confidence = 0.75 + (score - c.medium_threshold) * 0.3
        else:
            confidence = 0.8 - score * 0.2
        return self._bound(confidence)

    def apply_test_result(
        self, category: RiskCategory, confidence: float, test_result: Any
    ) -> Tuple[RiskCategory, float, bool]:
        """
        Escalate by one level on slow latency, else on low accuracy.

        The test result can only raise the category and confidence.
        """
        c = self.config
        if test_result.average_latency_ms > c.test_latency_threshold_ms:
            return category.escalate(), self._bound(confidence + c.test_latency_boost), True
        if test_result.accuracy_percent < c.test_accuracy_floor:
            return category.escalate(), self._bound(confidence + c.test_accuracy_boost), True
        return category, confidence, False

    def biomarkers(self, metrics: AggregatedMetrics) -> BiomarkerImpairments:
        c = self.config
        saccade = self._percent(metrics.saccade_latency_ms / c.saccade_scale_ms)
        pursuit = self._percent((1 - metrics.smooth_pursuit_gain) / c.pursuit_scale)
        fixation = self._percent((1 - metrics.fixation_stability) / c.fixation_scale)
        velocity = self._percent((c.velocity_reference - metrics.saccade_velocity) / c.velocity_reference)

        ws, wp, wf, wv = c.overall_weights
        overall = float(np.clip(100 - (saccade * ws + pursuit * wp + fixation * wf + velocity * wv), 0.0, 100.0))
        return BiomarkerImpairments(saccade, pursuit, fixation, velocity, overall)

    @staticmethod
    def _percent(ratio: float) -> float:
        return float(np.clip(ratio * 100.0, 0.0, 100.0))

    def _bound(self, confidence: float) -> float:
        return float(np.clip(confidence, self.config.min_confidence, self.config.max_confidence))
