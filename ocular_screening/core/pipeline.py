"""
Ocular Screening Pipeline

One instance per capture session. Each call to process_frame() runs
geometry extraction, temporal features, event detection and scoring to
completion, appends the immutable sample to the bounded history, and
reclassifies once enough history exists.

A frame that yields no geometry is a data gap: the caller receives a
degraded sample and the history is left untouched.
"""
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Tuple

from ocular_screening.config import Settings, get_settings
from ocular_screening.utils import get_logger
from ocular_screening.core.errors import CalibrationError, DataGapError
from ocular_screening.core.extraction.base import FrameGeometry, LandmarkFrame
from ocular_screening.core.extraction.geometry import GeometryExtractor
from ocular_screening.core.tracking.history import SampleHistory
from ocular_screening.core.tracking.temporal import (
    CalibrationState, EyeSample, ScreenGaze, TemporalFeatureTracker,
)
from ocular_screening.core.tracking.events import EventDetector
from ocular_screening.core.inference.scoring import CognitiveScorer, ScoringWeights
from ocular_screening.core.inference.risk_engine import CognitiveAssessment, RiskClassifier
from ocular_screening.core.tasks.saccadic import SaccadicTestResult

logger = get_logger(__name__)


@dataclass(frozen=True)
class FrameResult:
    """Per-frame output: the sample, plus an assessment when one was produced."""
    sample: EyeSample
    assessment: Optional[CognitiveAssessment] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sample": self.sample.to_dict(),
            "assessment": self.assessment.to_dict() if self.assessment else None,
        }


class OcularPipeline:
    """
    Frame-driven eye-metric pipeline for one session.

    Usage:
        with OcularPipeline() as pipeline:
            for frame in frames:
                result = pipeline.process_frame(frame)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        weights: Optional[ScoringWeights] = None,
        classifier: Optional[RiskClassifier] = None,
        extractor: Optional[GeometryExtractor] = None,
    ):
        self.settings = settings or get_settings()
        self.extractor = extractor or GeometryExtractor()
        self.tracker = TemporalFeatureTracker(self.settings)
        self.events = EventDetector(self.settings)
        self.scorer = CognitiveScorer(weights)
        self.classifier = classifier or RiskClassifier(settings=self.settings)
        if self.classifier.min_samples > self.settings.history_capacity:
            raise ValueError(
                f"history_capacity={self.settings.history_capacity} can never hold "
                f"the {self.classifier.min_samples} samples needed for assessment"
            )

        self._history: SampleHistory[EyeSample] = SampleHistory(self.settings.history_capacity)
        self._tick = 0
        self._latest_sample: Optional[EyeSample] = None
        self._latest_assessment: Optional[CognitiveAssessment] = None
        self._test_result: Optional[SaccadicTestResult] = None
        self._gap_count = 0
        self._closed = False

        logger.info(
            f"OcularPipeline created (capacity={self.settings.history_capacity}, "
            f"min_history={self.classifier.min_samples})"
        )

    # ------------------------------------------------------------------ frames

    def process_frame(self, frame: Optional[Any]) -> FrameResult:
        """
        Process one frame of landmarks, or None when the detector found no face.

        Every call advances the nominal clock by one frame interval.
        """
        if self._closed:
            raise RuntimeError("Pipeline is closed")

        frame_index = self._tick
        timestamp_s = frame_index * self.settings.frame_interval_s
        self._tick += 1

        geometry = self.extractor.extract(self._coerce(frame))
        if geometry is None:
            gap = self._gap_sample(frame_index, timestamp_s)
            self._latest_sample = gap
            return FrameResult(sample=gap)

        history = self._history.snapshot()
        sample = self._build_sample(geometry, history, frame_index, timestamp_s)
        self._history.append(sample)
        self._latest_sample = sample

        assessment = None
        if len(self._history) >= self.classifier.min_samples:
            assessment = self._classify()
        return FrameResult(sample=sample, assessment=assessment)

    @staticmethod
    def _coerce(frame: Optional[Any]) -> Optional[LandmarkFrame]:
        if frame is None or isinstance(frame, LandmarkFrame):
            return frame
        try:
            return LandmarkFrame(frame)
        except (TypeError, ValueError, IndexError) as e:
            logger.debug(f"Unusable landmark input: {type(e).__name__}: {e}")
            return None

    def _build_sample(
        self,
        geometry: FrameGeometry,
        history: Tuple[EyeSample, ...],
        frame_index: int,
        timestamp_s: float,
    ) -> EyeSample:
        features = self.tracker.compute(geometry, history)
        average_openness = geometry.average_openness
        saccade = self.events.detect_saccade(features.saccade_velocity, features.movement, timestamp_s)

        score = self.scorer.score(
            average_openness,
            geometry.asymmetry,
            features.gaze_stability,
            features.movement,
            features.saccade_velocity,
            features.fixation_duration_ms,
        )

        return EyeSample(
            frame_index=frame_index,
            timestamp_s=timestamp_s,
            face_detected=True,
            confidence=self.settings.face_confidence,
            left_openness=geometry.left.openness,
            right_openness=geometry.right.openness,
            average_openness=average_openness,
            asymmetry=geometry.asymmetry,
            pupil_left=geometry.left.pupil,
            pupil_right=geometry.right.pupil,
            gaze_direction=geometry.gaze_direction,
            screen_gaze=features.screen_gaze,
            movement=features.movement,
            saccade_velocity=features.saccade_velocity,
            is_blink=self.events.is_blink(average_openness),
            saccade_detected=saccade,
            is_fixation=self.events.is_fixation(features.movement, saccade),
            gaze_stability=features.gaze_stability,
            fixation_duration_ms=features.fixation_duration_ms,
            cognitive_score=score,
        )

    def _gap_sample(self, frame_index: int, timestamp_s: float) -> EyeSample:
        """Degraded sample: last known geometry, no motion, low confidence."""
        self._gap_count += 1
        logger.debug(f"{DataGapError(f'no eye geometry at frame {frame_index}')}")

        previous = self._history.last()
        if previous is None:
            return EyeSample(
                frame_index=frame_index,
                timestamp_s=timestamp_s,
                face_detected=False,
                confidence=self.settings.no_face_confidence,
                left_openness=0.0,
                right_openness=0.0,
                average_openness=0.0,
                asymmetry=0.0,
                pupil_left=(0.0, 0.0),
                pupil_right=(0.0, 0.0),
                gaze_direction=(0.0, 0.0),
                screen_gaze=ScreenGaze(0.5, 0.5, "center"),
                gaze_stability=self.settings.gaze_stability_default,
            )
        return replace(
            previous,
            frame_index=frame_index,
            timestamp_s=timestamp_s,
            face_detected=False,
            confidence=self.settings.no_face_confidence,
            movement=0.0,
            saccade_velocity=0.0,
            is_blink=False,
            saccade_detected=False,
            is_fixation=False,
        )

    # -------------------------------------------------------------- assessment

    def _classify(self) -> CognitiveAssessment:
        assessment = self.classifier.classify(self._history.snapshot(), self._test_result)
        self._latest_assessment = assessment
        return assessment

    def assess(self) -> CognitiveAssessment:
        """Classify the current history on demand (default when too short)."""
        return self._classify()

    def submit_test_result(self, result: SaccadicTestResult) -> CognitiveAssessment:
        """Store a completed test result and reclassify immediately."""
        self._test_result = result
        logger.info(
            f"Saccadic test result received: latency={result.average_latency_ms:.0f}ms, "
            f"accuracy={result.accuracy_percent:.0f}%"
        )
        return self._classify()

    # ------------------------------------------------------------- calibration

    def calibrate(self) -> Optional[CalibrationState]:
        """Use the latest face-detected sample's gaze as screen center."""
        latest = self._history.last()
        try:
            return self.tracker.calibrate(latest.gaze_direction if latest else None)
        except CalibrationError as e:
            logger.warning(f"Calibration skipped: {e}")
            return None

    # --------------------------------------------------------------- lifecycle

    def reset(self) -> None:
        """Discard history, calibration, event state, test result and clock."""
        self._history.clear()
        self.tracker.reset()
        self.events.reset()
        self._tick = 0
        self._latest_sample = None
        self._latest_assessment = None
        self._test_result = None
        self._gap_count = 0
        logger.info("OcularPipeline reset")

    def close(self) -> None:
        self.reset()
        self._closed = True

    def __enter__(self) -> "OcularPipeline":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -------------------------------------------------------------- accessors

    @property
    def history(self) -> Tuple[EyeSample, ...]:
        return self._history.snapshot()

    @property
    def latest_sample(self) -> Optional[EyeSample]:
        return self._latest_sample

    @property
    def latest_assessment(self) -> Optional[CognitiveAssessment]:
        return self._latest_assessment

    @property
    def calibration(self) -> Optional[CalibrationState]:
        return self.tracker.calibration

    @property
    def test_result(self) -> Optional[SaccadicTestResult]:
        return self._test_result

    @property
    def is_closed(self) -> bool:
        return self._closed

    def get_status(self) -> Dict[str, Any]:
        return {
            "frames": self._tick,
            "history": len(self._history),
            "gaps": self._gap_count,
            "calibrated": self.tracker.calibration is not None,
            "saccades": self.events.saccade_count,
            "extraction": self.extractor.get_status(),
        }
