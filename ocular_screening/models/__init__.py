"""
Report models for the JSON boundary.
"""
from .assessment import (
    ScreenGazeModel, EyeSampleModel, BiomarkersModel, AggregatedMetricsModel,
    AssessmentModel, SaccadicTestModel, NarrationModel, AssessmentReport,
)

__all__ = [
    "ScreenGazeModel",
    "EyeSampleModel",
    "BiomarkersModel",
    "AggregatedMetricsModel",
    "AssessmentModel",
    "SaccadicTestModel",
    "NarrationModel",
    "AssessmentReport",
]
