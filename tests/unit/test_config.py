"""
Unit Tests for settings and shared helpers.
"""
import logging
import math

import pytest
from pydantic import ValidationError

from ocular_screening.config import Settings, get_settings
from ocular_screening.utils import configure_logging, finite_or


def test_defaults():
    s = Settings()
    assert s.history_capacity == 60
    assert s.min_history_for_assessment == 30
    assert s.blink_threshold == 0.15
    assert s.frame_interval_s == pytest.approx(1 / 60)


def test_environment_override(monkeypatch):
    monkeypatch.setenv("OCULAR_HISTORY_CAPACITY", "90")
    monkeypatch.setenv("OCULAR_BLINK_THRESHOLD", "0.2")
    s = Settings()
    assert s.history_capacity == 90
    assert s.blink_threshold == 0.2


def test_capacity_must_hold_minimum_history():
    with pytest.raises(ValidationError):
        Settings(history_capacity=29, min_history_for_assessment=30)


def test_capacity_equal_to_minimum_is_allowed():
    s = Settings(history_capacity=30, min_history_for_assessment=30)
    assert s.history_capacity == s.min_history_for_assessment


def test_cached_instance():
    assert get_settings() is get_settings()


@pytest.mark.parametrize("value,expected", [(1.5, 1.5), (math.nan, 0.0), (math.inf, 0.0)])
def test_finite_or(value, expected):
    assert finite_or(value) == expected


def test_configure_logging_is_idempotent():
    configure_logging("DEBUG")
    configure_logging("DEBUG")
    logger = logging.getLogger("ocular_screening")
    handlers = [h for h in logger.handlers if getattr(h, "_ocular_handler", False)]
    assert len(handlers) == 1
    assert logger.level == logging.DEBUG
