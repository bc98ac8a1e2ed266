"""
Assessment Narration

Optional decorator that asks an external text-generation client to describe
an assessment in plain language. The client only adds patterns,
recommendations and guidance text; risk category, confidence and biomarkers
always come from the algorithmic result.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ocular_screening.config import Settings, get_settings
from ocular_screening.utils import get_logger
from ocular_screening.core.errors import ExternalEnhancementFailure
from ocular_screening.core.inference.risk_engine import CognitiveAssessment
from ocular_screening.core.inference.recommendations import observed_patterns, professional_guidance

logger = get_logger(__name__)

# (prompt, payload) -> JSON text
NarrationClient = Callable[[str, Dict[str, Any]], str]

ANALYSIS_PROMPT = """You are a cognitive screening assistant describing eye-movement measurements.

EYE MOVEMENT DATA:
- Saccadic latency: [LATENCY]ms (normal: 150-250ms)
- Gaze stability: [STABILITY]% (normal: >70%)
- Fixation duration: [FIXATION]ms (normal: 200-400ms)
- Saccade velocity: [VELOCITY]px/s (normal: 30-60px/s)
- Eye asymmetry: [ASYMMETRY] (normal: <0.1)
- Blink rate: [BLINK_RATE]/min (normal: 15-20/min)

COMPUTED RESULT (do not change):
- Risk category: [RISK]
- Confidence: [CONFIDENCE]

INTERPRETATION GUIDE:
- Increased saccadic latency: possible attention/processing delays
- Poor gaze stability: potential executive function concerns
- Irregular fixation: possible working memory issues
- High asymmetry: potential neurological considerations

Respond with JSON only:
{"patterns": ["..."], "recommendations": ["..."], "professionalGuidance": "..."}

This is NOT a medical diagnosis. Always recommend review by a qualified healthcare provider."""


class NarrationResponse(BaseModel):
    """Closed shape accepted from the narration client."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    patterns: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    professional_guidance: str = Field(default="", alias="professionalGuidance")


@dataclass(frozen=True)
class EnhancedAssessment:
    """Algorithmic assessment plus narration text."""
    assessment: CognitiveAssessment
    patterns: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    professional_guidance: str = ""
    source: str = "algorithmic"
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "assessment": self.assessment.to_dict(),
            "patterns": list(self.patterns),
            "recommendations": list(self.recommendations),
            "professional_guidance": self.professional_guidance,
            "source": self.source,
            "error": self.error,
        }


class AssessmentNarrator:
    """
    Wraps a narration client with a deterministic fallback.

    Any client failure (exception, invalid JSON, wrong shape) is logged and
    the rule-based text is returned instead.
    """

    def __init__(self, client: Optional[NarrationClient] = None, settings: Optional[Settings] = None):
        self.client = client
        self.settings = settings or get_settings()
        self._call_count = 0
        self._failure_count = 0

    @property
    def is_available(self) -> bool:
        return self.client is not None

    def raw_metrics(
        self,
        assessment: CognitiveAssessment,
        samples: Sequence[Any],
        test_result: Optional[Any] = None,
    ) -> Dict[str, float]:
        """Values substituted into the prompt and sent as payload."""
        latest = samples[-1] if samples else None
        if test_result is not None:
            latency = test_result.average_latency_ms
        elif assessment.metrics is not None:
            latency = assessment.metrics.saccade_latency_ms
        else:
            latency = 200.0

        return {
            "saccadic_latency": float(latency),
            "gaze_stability": float(latest.gaze_stability) if latest else 0.7,
            "fixation_duration": float(latest.fixation_duration_ms) if latest else 250.0,
            "saccade_velocity": float(latest.saccade_velocity) if latest else 45.0,
            "asymmetry": float(latest.asymmetry) if latest else 0.05,
            "average_openness": float(latest.average_openness) if latest else 0.3,
            "blink_rate": self.blink_rate_per_minute(samples),
            "history_length": float(len(samples)),
        }

    def blink_rate_per_minute(self, samples: Sequence[Any]) -> float:
        """Blinks per minute at the nominal frame rate; 15 without history."""
        if not samples:
            return 15.0
        minutes = len(samples) * self.settings.frame_interval_s / 60.0
        blinks = sum(1 for s in samples if s.is_blink)
        return blinks / minutes

    def build_prompt(self, assessment: CognitiveAssessment, metrics: Dict[str, float]) -> str:
        return (
            ANALYSIS_PROMPT
            .replace("[LATENCY]", f"{metrics['saccadic_latency']:.0f}")
            .replace("[STABILITY]", f"{metrics['gaze_stability'] * 100:.0f}")
            .replace("[FIXATION]", f"{metrics['fixation_duration']:.0f}")
            .replace("[VELOCITY]", f"{metrics['saccade_velocity']:.1f}")
            .replace("[ASYMMETRY]", f"{metrics['asymmetry']:.3f}")
            .replace("[BLINK_RATE]", f"{metrics['blink_rate']:.0f}")
            .replace("[RISK]", assessment.risk_category.value)
            .replace("[CONFIDENCE]", f"{assessment.confidence:.2f}")
        )

    def fallback(self, assessment: CognitiveAssessment, error: Optional[str] = None) -> EnhancedAssessment:
        """Rule-based narration from the assessment alone."""
        category = assessment.risk_category.value
        return EnhancedAssessment(
            assessment=assessment,
            patterns=observed_patterns(assessment.biomarkers),
            recommendations=list(assessment.recommendations),
            professional_guidance=professional_guidance(category),
            source="algorithmic",
            error=error,
        )

    def enhance(
        self,
        assessment: CognitiveAssessment,
        samples: Sequence[Any] = (),
        test_result: Optional[Any] = None,
    ) -> EnhancedAssessment:
        if self.client is None:
            return self.fallback(assessment)

        metrics = self.raw_metrics(assessment, samples, test_result)
        prompt = self.build_prompt(assessment, metrics)
        payload = {"algorithmic_result": assessment.to_dict(), "raw_metrics": metrics}
        if self.settings.narration_model:
            payload["model"] = self.settings.narration_model
        self._call_count += 1

        try:
            narration = self._request(prompt, payload)
        except ExternalEnhancementFailure as e:
            self._failure_count += 1
            logger.warning(f"Narration failed, using algorithmic fallback: {e}")
            return self.fallback(assessment, error=str(e))

        category = assessment.risk_category.value
        return EnhancedAssessment(
            assessment=assessment,
            patterns=narration.patterns or observed_patterns(assessment.biomarkers),
            recommendations=narration.recommendations or list(assessment.recommendations),
            professional_guidance=narration.professional_guidance or professional_guidance(category),
            source="narration",
        )

    def _request(self, prompt: str, payload: Dict[str, Any]) -> NarrationResponse:
        try:
            text = self.client(prompt, payload)
        except Exception as e:
            raise ExternalEnhancementFailure(f"client error: {type(e).__name__}: {e}") from e

        try:
            return NarrationResponse.model_validate_json(text)
        except (ValidationError, TypeError) as e:
            raise ExternalEnhancementFailure(f"invalid narration payload: {e}") from e

    def get_stats(self) -> Dict[str, Any]:
        return {
            "available": self.is_available,
            "calls": self._call_count,
            "failures": self._failure_count,
        }
