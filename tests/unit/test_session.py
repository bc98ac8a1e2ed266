"""
Unit Tests for the async ScreeningSession and report models.
"""
import asyncio
import json
import time
from typing import Any, Dict, List

import pytest

from ocular_screening.config import Settings
from ocular_screening.core.enhancement import AssessmentNarrator
from ocular_screening.core.extraction.synthetic import make_frame, stable_sequence
from ocular_screening.core.inference import RiskClassifier
from ocular_screening.core.tasks import SaccadicTestResult
from ocular_screening.models import AssessmentReport
from ocular_screening.services import ScreeningSession


class CollectingSink:
    def __init__(self):
        self.reports: List[Dict[str, Any]] = []

    async def publish(self, report: Dict[str, Any]) -> None:
        self.reports.append(report)


class FailingSink:
    async def publish(self, report: Dict[str, Any]) -> None:
        raise IOError("disk full")


async def feed(session, count):
    for frame in stable_sequence(count):
        await session.process_frame(frame)


@pytest.mark.asyncio
async def test_reports_published_after_minimum_history(settings):
    sink = CollectingSink()
    session = ScreeningSession(sinks=[sink], settings=settings)

    await feed(session, 35)
    await session.drain()

    assert len(sink.reports) == 6
    report = sink.reports[-1]
    assert report["session_id"] == session.session_id
    assert report["assessment"]["risk_category"] == "low"
    assert report["sample"]["face_detected"] is True
    json.dumps(report)
    await session.close()


@pytest.mark.asyncio
async def test_failing_sink_does_not_break_session(settings):
    good = CollectingSink()
    session = ScreeningSession(sinks=[FailingSink(), good], settings=settings)

    await feed(session, 31)
    await session.drain()

    assert len(good.reports) == 2
    assert session.get_stats()["sink_failures"] == 2
    assert len(session.pipeline.history) == 31
    await session.close()


@pytest.mark.asyncio
async def test_narration_attached(settings):
    client = lambda prompt, payload: json.dumps({"patterns": ["Stable gaze"]})
    sink = CollectingSink()
    session = ScreeningSession(sinks=[sink], narrator=AssessmentNarrator(client, settings), settings=settings)

    await feed(session, 30)
    await session.drain()

    narration = sink.reports[-1]["narration"]
    assert narration["source"] == "narration"
    assert narration["patterns"] == ["Stable gaze"]
    await session.close()


@pytest.mark.asyncio
async def test_slow_narration_times_out():
    settings = Settings(enhancement_timeout_s=0.05)

    def slow_client(prompt, payload):
        time.sleep(0.3)
        return "{}"

    sink = CollectingSink()
    session = ScreeningSession(sinks=[sink], narrator=AssessmentNarrator(slow_client, settings), settings=settings)

    await feed(session, 30)
    await session.drain()

    narration = sink.reports[-1]["narration"]
    assert narration["source"] == "algorithmic"
    assert narration["error"] == "timeout"
    await session.close()


@pytest.mark.asyncio
async def test_enhancement_flag_adds_fallback_narrator():
    session = ScreeningSession(settings=Settings(enable_enhancement=True))
    assert session.narrator is not None
    assert not session.narrator.is_available
    await session.close()


@pytest.mark.asyncio
async def test_no_sinks_schedules_nothing(settings):
    session = ScreeningSession(settings=settings)
    await feed(session, 30)
    assert session.pending == 0
    await session.close()


@pytest.mark.asyncio
async def test_submit_test_result_publishes(settings):
    sink = CollectingSink()
    session = ScreeningSession(sinks=[sink], settings=settings)
    await feed(session, 30)

    assessment = await session.submit_test_result(SaccadicTestResult(350.0, 100.0))
    await session.drain()

    assert assessment.risk_category.value == "medium"
    assert sink.reports[-1]["test_result"]["average_latency_ms"] == 350.0
    await session.close()


@pytest.mark.asyncio
async def test_close_tears_down(settings):
    async with ScreeningSession(sinks=[CollectingSink()], settings=settings) as session:
        await feed(session, 5)
        session.calibrate()

    assert session.pipeline.is_closed
    with pytest.raises(RuntimeError):
        await session.process_frame(make_frame())


def test_report_from_domain(settings, sample_factory):
    assessment = RiskClassifier(settings=settings).classify([sample_factory() for _ in range(30)])
    report = AssessmentReport.from_domain("SES-TEST", assessment)

    assert report.metrics is not None
    assert report.assessment.biomarkers.overall_cognitive_score <= 100
    assert report.narration is None
    assert "not a medical diagnosis" in report.disclaimer


class ExplodingNarrator(AssessmentNarrator):
    def enhance(self, assessment, samples=(), test_result=None):
        raise RuntimeError("narrator crashed")


@pytest.mark.asyncio
async def test_narrator_crash_falls_back(settings):
    sink = CollectingSink()
    session = ScreeningSession(sinks=[sink], narrator=ExplodingNarrator(settings=settings), settings=settings)

    await feed(session, 30)
    await session.drain()

    narration = sink.reports[-1]["narration"]
    assert narration["source"] == "algorithmic"
    assert narration["error"] == "RuntimeError"
    await session.close()


@pytest.mark.asyncio
async def test_report_build_failure_is_counted(settings, monkeypatch):
    class BrokenReport:
        @classmethod
        def from_domain(cls, *args, **kwargs):
            raise ValueError("bad report")

    monkeypatch.setattr("ocular_screening.services.session.AssessmentReport", BrokenReport)
    sink = CollectingSink()
    session = ScreeningSession(sinks=[sink], settings=settings)

    await feed(session, 31)
    await session.drain()

    assert sink.reports == []
    assert session.get_stats()["report_failures"] == 2
    assert session.pending == 0
    await session.close()
