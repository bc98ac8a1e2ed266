"""
Temporal Tracking Module

Bounded history, history-dependent features, calibration and discrete events.
"""
from .history import SampleHistory
from .temporal import (
    EyeSample, ScreenGaze, CalibrationState, TemporalFeatures,
    TemporalFeatureTracker, classify_quadrant,
)
from .events import EventDetector

__all__ = [
    "SampleHistory",
    "EyeSample",
    "ScreenGaze",
    "CalibrationState",
    "TemporalFeatures",
    "TemporalFeatureTracker",
    "classify_quadrant",
    "EventDetector",
]
