"""
Unit Tests for Inference Module

Tests for metric aggregation, profile similarity, risk classification
and recommendations.
"""
from dataclasses import replace

import numpy as np
import pytest

from ocular_screening.core.inference import (
    REFERENCE_PROFILES, AggregatedMetrics, BiomarkerImpairments, ClassifierConfig,
    RiskCategory, RiskClassifier, aggregate_metrics, pattern_similarity, profile_similarities,
)
from ocular_screening.core.inference.recommendations import (
    generate_recommendations, observed_patterns, professional_guidance,
)
from ocular_screening.core.tasks import SaccadicTestResult

NORMAL = REFERENCE_PROFILES["normal"].metrics
ADVANCED = REFERENCE_PROFILES["impaired-advanced"].metrics


@pytest.fixture
def classifier(settings) -> RiskClassifier:
    return RiskClassifier(settings=settings)


@pytest.fixture
def severe_metrics() -> AggregatedMetrics:
    return AggregatedMetrics(
        saccade_latency_ms=450,
        smooth_pursuit_gain=0.2,
        fixation_stability=0.1,
        antisaccade_errors=1.0,
        blink_rate=0.0,
        saccade_velocity=0.0,
        fixation_duration_ms=50,
        gaze_stability=0.0,
        pupil_movement_variance=1.0,
    )


class TestAggregation:
    """Tests for aggregate_metrics."""

    def test_empty_window_rejected(self):
        with pytest.raises(ValueError):
            aggregate_metrics([])

    def test_still_window_uses_defaults(self, sample_factory):
        metrics = aggregate_metrics([sample_factory() for _ in range(30)])
        assert metrics.saccade_latency_ms == 200.0
        assert metrics.saccade_velocity == 40.0
        assert metrics.pupil_movement_variance == 0.0
        assert metrics.antisaccade_errors == 0.0
        assert metrics.fixation_stability == 1.0

    def test_saccade_onset_latency(self, sample_factory):
        movements = [0.0, 0.005, 0.03, 0.0, 0.0]
        metrics = aggregate_metrics([sample_factory(movement=m) for m in movements])
        assert metrics.saccade_latency_ms == 100.0

    def test_single_sample_variance_default(self, sample_factory):
        assert aggregate_metrics([sample_factory()]).pupil_movement_variance == 0.1

    def test_asymmetry_maps_to_errors(self, sample_factory):
        metrics = aggregate_metrics([sample_factory(asymmetry=0.05) for _ in range(4)])
        assert metrics.antisaccade_errors == pytest.approx(0.4)

    def test_blink_rate(self, sample_factory):
        samples = [sample_factory(is_blink=i < 3) for i in range(10)]
        assert aggregate_metrics(samples).blink_rate == pytest.approx(0.3)

    def test_pursuit_floor(self, sample_factory):
        samples = [sample_factory(gaze_stability=0.0, movement=0.05) for _ in range(5)]
        assert aggregate_metrics(samples).smooth_pursuit_gain == 0.2

    def test_saccade_rate(self, sample_factory):
        # 2 flagged saccades over 6 frames at 60 fps -> 20 per second
        samples = [sample_factory(saccade_detected=i in (1, 4)) for i in range(6)]
        assert aggregate_metrics(samples).saccade_rate_hz == pytest.approx(20.0)


class TestPatternSimilarity:
    """Tests for reference-profile comparison."""

    @pytest.mark.parametrize("name", list(REFERENCE_PROFILES))
    def test_profile_matches_itself(self, name):
        profile = REFERENCE_PROFILES[name]
        assert pattern_similarity(profile.metrics, profile) == pytest.approx(1.0)

    def test_normal_closer_to_normal(self):
        sims = profile_similarities(NORMAL)
        assert sims["normal"] > sims["impaired-early"] > sims["impaired-advanced"]

    def test_bounded(self, severe_metrics):
        for value in profile_similarities(severe_metrics).values():
            assert 0.0 <= value <= 1.0

    def test_similarity_weights_sum_to_one(self):
        from ocular_screening.core.inference.patterns import SIMILARITY_WEIGHTS
        assert sum(SIMILARITY_WEIGHTS.values()) == pytest.approx(1.0)


class TestRiskScore:
    """Tests for penalties, categories and confidence."""

    def test_normal_profile_is_low(self, classifier):
        score = classifier.risk_score(NORMAL)
        assert score == pytest.approx(0.12 * 0.14 + 0.08 * 0.10)
        assert classifier.categorize(score) == RiskCategory.LOW

    def test_advanced_profile_is_medium(self, classifier):
        score = classifier.risk_score(ADVANCED)
        assert 0.4 <= score < 0.7
        assert classifier.categorize(score) == RiskCategory.MEDIUM

    def test_severe_is_high(self, classifier, severe_metrics):
        score = classifier.risk_score(severe_metrics)
        assert score >= 0.7
        assert classifier.confidence_for(RiskCategory.HIGH, score) == pytest.approx(0.8 + (score - 0.7) * 0.5)

    def test_penalty_weights_sum_to_one(self):
        c = ClassifierConfig()
        total = (c.latency_weight + c.pursuit_weight + c.fixation_weight + c.antisaccade_weight
                 + c.velocity_weight + c.gaze_weight + c.variance_weight)
        assert total == pytest.approx(1.0)

    @pytest.mark.parametrize("rate,penalty", [(0.0, 0.0), (2.0, 0.0), (4.0, 0.075), (9.0, 0.15)])
    def test_saccadic_intrusion_penalty(self, classifier, rate, penalty):
        base = classifier.risk_score(NORMAL)
        assert classifier.risk_score(replace(NORMAL, saccade_rate_hz=rate)) == pytest.approx(base + penalty)

    @pytest.mark.parametrize("score,expected", [
        (0.0, RiskCategory.LOW),
        (0.3999, RiskCategory.LOW),
        (0.4, RiskCategory.MEDIUM),
        (0.6999, RiskCategory.MEDIUM),
        (0.7, RiskCategory.HIGH),
        (1.0, RiskCategory.HIGH),
    ])
    def test_category_boundaries(self, classifier, score, expected):
        assert classifier.categorize(score) == expected

    def test_confidence_always_bounded(self, classifier):
        for score in np.linspace(0.0, 1.0, 101):
            category = classifier.categorize(score)
            assert 0.3 <= classifier.confidence_for(category, score) <= 0.95

    def test_low_confidence_formula(self, classifier):
        assert classifier.confidence_for(RiskCategory.LOW, 0.0) == pytest.approx(0.8)
        assert classifier.confidence_for(RiskCategory.MEDIUM, 0.5) == pytest.approx(0.78)


class TestTestResultEscalation:
    """Tests for discrete saccadic test incorporation."""

    def test_slow_latency_escalates(self, classifier):
        result = SaccadicTestResult(average_latency_ms=350.0, accuracy_percent=100.0)
        category, confidence, applied = classifier.apply_test_result(RiskCategory.LOW, 0.8, result)
        assert category == RiskCategory.MEDIUM
        assert confidence == pytest.approx(0.9)
        assert applied

    def test_400ms_latency_lifts_low(self, classifier):
        result = SaccadicTestResult(average_latency_ms=400.0, accuracy_percent=100.0)
        category, _, _ = classifier.apply_test_result(RiskCategory.LOW, 0.8, result)
        assert category != RiskCategory.LOW

    def test_confidence_capped(self, classifier):
        result = SaccadicTestResult(average_latency_ms=350.0, accuracy_percent=100.0)
        category, confidence, _ = classifier.apply_test_result(RiskCategory.HIGH, 0.92, result)
        assert category == RiskCategory.HIGH
        assert confidence == 0.95

    def test_low_accuracy_escalates(self, classifier):
        result = SaccadicTestResult(average_latency_ms=250.0, accuracy_percent=60.0)
        category, confidence, _ = classifier.apply_test_result(RiskCategory.MEDIUM, 0.8, result)
        assert category == RiskCategory.HIGH
        assert confidence == pytest.approx(0.85)

    def test_good_result_changes_nothing(self, classifier):
        result = SaccadicTestResult(average_latency_ms=250.0, accuracy_percent=90.0)
        assert classifier.apply_test_result(RiskCategory.LOW, 0.8, result) == (RiskCategory.LOW, 0.8, False)

    @pytest.mark.parametrize("category", list(RiskCategory))
    def test_never_de_escalates(self, classifier, category):
        order = [RiskCategory.LOW, RiskCategory.MEDIUM, RiskCategory.HIGH]
        for result in (
            SaccadicTestResult(400.0, 100.0),
            SaccadicTestResult(200.0, 10.0),
            SaccadicTestResult(200.0, 100.0),
        ):
            escalated, _, _ = classifier.apply_test_result(category, 0.7, result)
            assert order.index(escalated) >= order.index(category)


class TestBiomarkers:
    """Tests for impairment percentages."""

    def test_normal_profile(self, classifier):
        b = classifier.biomarkers(NORMAL)
        assert b.saccade == pytest.approx(40.0)
        assert b.pursuit == pytest.approx(10.0)
        assert b.fixation == pytest.approx(13.333, rel=1e-3)
        assert b.velocity == 0.0
        assert b.overall_score == pytest.approx(100 - (12 + 2.5 + 3.3333), rel=1e-4)

    def test_clamped(self, classifier, severe_metrics):
        b = classifier.biomarkers(replace(severe_metrics, saccade_latency_ms=900))
        assert b.saccade == 100.0
        assert 0.0 <= b.overall_score <= 100.0


class TestClassify:
    """Tests for the full classify() entry point."""

    def test_insufficient_history(self, classifier, sample_factory):
        assessment = classifier.classify([sample_factory() for _ in range(29)])
        assert assessment.is_default
        assert assessment.risk_category == RiskCategory.LOW
        assert assessment.confidence == 0.3
        assert assessment.biomarkers.overall_score == 75.0
        assert assessment.recommendations == ("Insufficient data for analysis",)

    def test_internal_failure_returns_default(self, classifier):
        assessment = classifier.classify([object()] * 30)
        assert assessment.is_default
        assert assessment.recommendations == ("Analysis error",)

    def test_still_window(self, classifier, sample_factory):
        assessment = classifier.classify([sample_factory() for _ in range(30)])
        assert not assessment.is_default
        assert assessment.risk_category == RiskCategory.LOW
        assert set(assessment.profile_similarity) == set(REFERENCE_PROFILES)
        assert assessment.metrics is not None

    def test_test_result_does_not_change_biomarkers(self, classifier, sample_factory):
        samples = [sample_factory() for _ in range(30)]
        before = classifier.classify(samples)
        after = classifier.classify(samples, SaccadicTestResult(350.0, 100.0))
        assert after.biomarkers == before.biomarkers
        assert after.risk_category == RiskCategory.MEDIUM
        assert after.test_result_applied

    def test_to_dict(self, classifier, sample_factory):
        data = classifier.classify([sample_factory() for _ in range(30)]).to_dict()
        assert data["risk_category"] == "low"
        assert "saccade_impairment" in data["biomarkers"]


class TestRecommendations:
    """Tests for recommendation text."""

    def test_low_baseline(self):
        assert len(generate_recommendations("low", BiomarkerImpairments())) == 4

    def test_truncated_to_six(self):
        biomarkers = BiomarkerImpairments(saccade=80, pursuit=80, fixation=80, velocity=80, overall_score=10)
        recs = generate_recommendations("high", biomarkers)
        assert len(recs) == 6
        assert recs[0] == "Urgent consultation with neurologist recommended"
        assert "Visual tracking exercises may help eye movement speed" not in recs

    def test_conditional_item(self):
        recs = generate_recommendations("medium", BiomarkerImpairments(saccade=45))
        assert recs[-1] == "Eye movement exercises may improve coordination"

    def test_observed_patterns(self):
        patterns = observed_patterns(BiomarkerImpairments(saccade=50, pursuit=10, fixation=40))
        assert patterns == [
            "Delayed saccadic eye movements observed",
            "Decreased fixation stability during visual tasks",
        ]

    def test_guidance_per_category(self):
        for category in RiskCategory:
            assert professional_guidance(category.value)
