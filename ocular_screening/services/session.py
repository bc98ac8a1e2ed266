"""
Screening Session Service

Async host around OcularPipeline. Frames are processed synchronously and in
order; each new assessment is handed to result sinks (storage, UI push, ...)
as a fire-and-forget task so slow or failing sinks never block or corrupt
the frame loop.
"""
import asyncio
import uuid
from typing import Any, Dict, Iterable, List, Optional, Protocol, Set

from ocular_screening.config import Settings, get_settings
from ocular_screening.utils import get_logger
from ocular_screening.core.errors import ExternalEnhancementFailure
from ocular_screening.core.pipeline import FrameResult, OcularPipeline
from ocular_screening.core.inference.risk_engine import CognitiveAssessment
from ocular_screening.core.tracking.temporal import CalibrationState, EyeSample
from ocular_screening.core.tasks.saccadic import SaccadicTestResult
from ocular_screening.core.enhancement.narrator import AssessmentNarrator, EnhancedAssessment
from ocular_screening.models.assessment import AssessmentReport

logger = get_logger(__name__)


class ResultSink(Protocol):
    """Anything that accepts a JSON-ready assessment report."""

    async def publish(self, report: Dict[str, Any]) -> None:
        ...


class ScreeningSession:
    """
    One capture session: pipeline, optional narrator and result sinks.

    Usage:
        async with ScreeningSession(sinks=[sink]) as session:
            for frame in frames:
                await session.process_frame(frame)
    """

    def __init__(
        self,
        pipeline: Optional[OcularPipeline] = None,
        sinks: Iterable[ResultSink] = (),
        narrator: Optional[AssessmentNarrator] = None,
        session_id: Optional[str] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.pipeline = pipeline or OcularPipeline(self.settings)
        self.sinks: List[ResultSink] = list(sinks)
        if narrator is None and self.settings.enable_enhancement:
            narrator = AssessmentNarrator(settings=self.settings)
        self.narrator = narrator
        self.session_id = session_id or f"SES-{uuid.uuid4().hex[:8].upper()}"

        self._tasks: Set[asyncio.Task] = set()
        self._published = 0
        self._sink_failures = 0
        self._report_failures = 0
        self._closed = False
        logger.info(f"Screening session {self.session_id} started ({len(self.sinks)} sinks)")

    async def process_frame(self, frame: Optional[Any]) -> FrameResult:
        """Run one frame through the pipeline and dispatch any new assessment."""
        if self._closed:
            raise RuntimeError(f"Session {self.session_id} is closed")
        result = self.pipeline.process_frame(frame)
        if result.assessment is not None:
            self._schedule(result.assessment, result.sample)
        return result

    def calibrate(self) -> Optional[CalibrationState]:
        return self.pipeline.calibrate()

    async def submit_test_result(self, result: SaccadicTestResult) -> CognitiveAssessment:
        assessment = self.pipeline.submit_test_result(result)
        self._schedule(assessment, self.pipeline.latest_sample)
        return assessment

    def _schedule(self, assessment: CognitiveAssessment, sample: Optional[EyeSample]) -> None:
        if not self.sinks and self.narrator is None:
            return
        task = asyncio.create_task(
            self._dispatch(assessment, sample, self.pipeline.history, self.pipeline.test_result)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _dispatch(
        self,
        assessment: CognitiveAssessment,
        sample: Optional[EyeSample],
        history,
        test_result: Optional[SaccadicTestResult],
    ) -> None:
        try:
            narration = await self._narrate(assessment, history, test_result) if self.narrator else None
            report = AssessmentReport.from_domain(
                self.session_id, assessment, sample=sample, test_result=test_result, narration=narration
            ).model_dump()
        except Exception as e:
            self._report_failures += 1
            failure = ExternalEnhancementFailure(f"report build failed: {type(e).__name__}: {e}")
            logger.warning(f"[{self.session_id}] {failure}")
            return

        for sink in self.sinks:
            try:
                await sink.publish(report)
                self._published += 1
            except Exception as e:
                self._sink_failures += 1
                failure = ExternalEnhancementFailure(f"sink {type(sink).__name__} failed: {e}")
                logger.warning(f"[{self.session_id}] {failure}")

    async def _narrate(
        self,
        assessment: CognitiveAssessment,
        history,
        test_result: Optional[SaccadicTestResult],
    ) -> EnhancedAssessment:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.narrator.enhance, assessment, history, test_result),
                timeout=self.settings.enhancement_timeout_s,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"[{self.session_id}] Narration exceeded {self.settings.enhancement_timeout_s}s, "
                "using algorithmic fallback"
            )
            return self.narrator.fallback(assessment, error="timeout")
        except Exception as e:
            logger.warning(f"[{self.session_id}] Narration raised {type(e).__name__}: {e}, using algorithmic fallback")
            return self.narrator.fallback(assessment, error=type(e).__name__)

    async def drain(self) -> None:
        """Wait for every pending dispatch to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Cancel pending dispatches and tear the pipeline down."""
        if self._closed:
            return
        self._closed = True
        pending = list(self._tasks)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self.pipeline.close()
        logger.info(f"Screening session {self.session_id} closed")

    async def __aenter__(self) -> "ScreeningSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def get_stats(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "published": self._published,
            "sink_failures": self._sink_failures,
            "report_failures": self._report_failures,
            "pending": len(self._tasks),
            "pipeline": self.pipeline.get_status(),
        }
