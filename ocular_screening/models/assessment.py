"""
Assessment Report Models

JSON boundary for samples, assessments and reports handed to sinks.
"""
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime, timezone


class ScreenGazeModel(BaseModel):
    """Gaze position on screen, normalized [0, 1]."""
    x: float
    y: float
    quadrant: str = "center"


class EyeSampleModel(BaseModel):
    """One processed frame."""
    frame_index: int
    timestamp_s: float
    face_detected: bool
    confidence: float
    left_openness: float
    right_openness: float
    average_openness: float
    asymmetry: float
    pupil_left: List[float]
    pupil_right: List[float]
    gaze_direction: List[float]
    screen_gaze: ScreenGazeModel
    movement: float = 0.0
    saccade_velocity: float = 0.0
    is_blink: bool = False
    saccade_detected: bool = False
    is_fixation: bool = False
    gaze_stability: float = 0.8
    fixation_duration_ms: float = 0.0
    cognitive_score: float = 0.0

    @classmethod
    def from_domain(cls, sample) -> "EyeSampleModel":
        return cls.model_validate(sample.to_dict())


class BiomarkersModel(BaseModel):
    """Impairment percentages and overall score."""
    saccade_impairment: float = Field(..., ge=0, le=100)
    pursuit_impairment: float = Field(..., ge=0, le=100)
    fixation_impairment: float = Field(..., ge=0, le=100)
    velocity_impairment: float = Field(..., ge=0, le=100)
    overall_cognitive_score: float = Field(..., ge=0, le=100)


class AggregatedMetricsModel(BaseModel):
    """Session-level metrics used for classification."""
    saccade_latency_ms: float
    smooth_pursuit_gain: float
    fixation_stability: float
    antisaccade_errors: float
    blink_rate: float
    saccade_velocity: float
    fixation_duration_ms: float
    gaze_stability: float
    pupil_movement_variance: float
    saccade_rate_hz: float = 0.0

class AssessmentModel(BaseModel):
    """Risk classification result."""
    risk_category: str = Field(..., description="low, medium or high")
    confidence: float = Field(..., ge=0, le=1)
    biomarkers: BiomarkersModel
    recommendations: List[str]
    risk_score: float = 0.0
    profile_similarity: Dict[str, float] = Field(default_factory=dict)
    test_result_applied: bool = False
    is_default: bool = False
    sample_count: int = 0

    @classmethod
    def from_domain(cls, assessment) -> "AssessmentModel":
        data = assessment.to_dict()
        data.pop("metrics", None)
        return cls.model_validate(data)


class SaccadicTestModel(BaseModel):
    """Completed saccadic target test."""
    average_latency_ms: float
    accuracy_percent: float = Field(..., ge=0, le=100)
    per_trial_latencies_ms: List[float] = Field(default_factory=list)
    targets_shown: int = 0

    @classmethod
    def from_domain(cls, result) -> "SaccadicTestModel":
        return cls.model_validate(result.to_dict())


class NarrationModel(BaseModel):
    """Narration text attached to a report."""
    patterns: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    professional_guidance: str = ""
    source: str = "algorithmic"
    error: Optional[str] = None


class AssessmentReport(BaseModel):
    """Everything a sink receives for one assessment."""
    session_id: str
    generated_at: str
    assessment: AssessmentModel
    metrics: Optional[AggregatedMetricsModel] = None
    sample: Optional[EyeSampleModel] = None
    test_result: Optional[SaccadicTestModel] = None
    narration: Optional[NarrationModel] = None
    disclaimer: str = "Screening indicators only. This is not a medical diagnosis."

    @classmethod
    def from_domain(
        cls,
        session_id: str,
        assessment,
        sample=None,
        test_result=None,
        narration=None,
    ) -> "AssessmentReport":
        """Build from CognitiveAssessment, EyeSample, SaccadicTestResult and EnhancedAssessment."""
        narration_model = None
        if narration is not None:
            data = narration.to_dict()
            data.pop("assessment", None)
            narration_model = NarrationModel.model_validate(data)

        return cls(
            session_id=session_id,
            generated_at=datetime.now(timezone.utc).isoformat(),
            assessment=AssessmentModel.from_domain(assessment),
            metrics=AggregatedMetricsModel.model_validate(assessment.metrics.to_dict()) if assessment.metrics else None,
            sample=EyeSampleModel.from_domain(sample) if sample is not None else None,
            test_result=SaccadicTestModel.from_domain(test_result) if test_result is not None else None,
            narration=narration_model,
        )
