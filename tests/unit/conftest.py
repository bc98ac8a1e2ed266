"""
Shared fixtures for the unit suite.
"""
from types import SimpleNamespace

import pytest

from ocular_screening.config import Settings
from ocular_screening.core.pipeline import OcularPipeline
from ocular_screening.core.extraction.synthetic import make_frame


@pytest.fixture
def settings() -> Settings:
    """Fresh settings with the canonical defaults."""
    return Settings()


@pytest.fixture
def pipeline(settings) -> OcularPipeline:
    return OcularPipeline(settings)


@pytest.fixture
def open_frame():
    """Both eyes open (EAR 0.3), gaze centered."""
    return make_frame(0.3, 0.3, (0.0, 0.0))


def fake_sample(**overrides) -> SimpleNamespace:
    """Minimal EyeSample stand-in for aggregation and tracker tests."""
    values = dict(
        movement=0.0,
        gaze_stability=1.0,
        fixation_duration_ms=300.0,
        asymmetry=0.0,
        saccade_velocity=0.0,
        is_blink=False,
        saccade_detected=False,
        gaze_direction=(0.0, 0.0),
        average_openness=0.3,
        pupil_left=(0.35, 0.45),
        pupil_right=(0.65, 0.45),
    )
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.fixture
def sample_factory():
    return fake_sample
