"""
Unit Tests for the per-frame cognitive score.
"""
import math

import pytest

from ocular_screening.core.inference import CognitiveScorer, ScoringWeights


@pytest.fixture
def scorer() -> CognitiveScorer:
    return CognitiveScorer()


def test_baseline_at_expected_openness(scorer):
    assert scorer.score(0.25, 0.0, 0.0, 0.0, 0.0, 0.0) == pytest.approx(70.0)


def test_stable_open_eyes(scorer):
    # 70 + 5 (openness) + 15 (stability) + 2.5 (500 ms fixation)
    assert scorer.score(0.3, 0.0, 1.0, 0.0, 0.0, 500.0) == pytest.approx(92.5)


def test_asymmetry_and_movement_penalties(scorer):
    assert scorer.score(0.25, 0.01, 0.0, 0.05, 0.0, 0.0) == pytest.approx(70.0 - 3.0 - 10.0)


def test_velocity_penalty_only_above_soft_ceiling(scorer):
    assert scorer.score(0.25, 0.0, 0.0, 0.0, 600.0, 0.0) == pytest.approx(70.0)
    assert scorer.score(0.25, 0.0, 0.0, 0.0, 1600.0, 0.0) == pytest.approx(60.0)


@pytest.mark.parametrize("args", [
    (1.0, 0.0, 1.0, 0.0, 0.0, 10000.0),
    (0.0, 1.0, 0.0, 1.0, 1e6, 0.0),
    (0.0, 10.0, 0.0, 1000.0, 0.0, 0.0),
])
def test_clamped_to_range(scorer, args):
    assert 0.0 <= scorer.score(*args) <= 100.0


def test_non_finite_inputs_contribute_nothing(scorer):
    reference = scorer.score(0.3, 0.0, 1.0, 0.0, 0.0, 0.0)
    assert scorer.score(0.3, 0.0, 1.0, math.nan, math.inf, 0.0) == pytest.approx(reference)


def test_custom_weights():
    scorer = CognitiveScorer(ScoringWeights(baseline=50.0))
    assert scorer.score(0.25, 0.0, 0.0, 0.0, 0.0, 0.0) == pytest.approx(50.0)


def test_score_sample(scorer, sample_factory):
    sample = sample_factory(average_openness=0.25, gaze_stability=0.0, fixation_duration_ms=0.0)
    assert scorer.score_sample(sample) == pytest.approx(70.0)
