"""
Narration Module

Optional plain-language description of algorithmic assessments.
"""
from .narrator import AssessmentNarrator, EnhancedAssessment, NarrationResponse, NarrationClient

__all__ = [
    "AssessmentNarrator",
    "EnhancedAssessment",
    "NarrationResponse",
    "NarrationClient",
]
