"""
Structured Eye-Movement Tasks
"""
from .saccadic import GridTarget, GRID_POSITIONS, SaccadicTest, SaccadicTestResult, TARGETS_PER_TEST, TARGET_TIMEOUT_MS

__all__ = [
    "GridTarget",
    "GRID_POSITIONS",
    "SaccadicTest",
    "SaccadicTestResult",
    "TARGETS_PER_TEST",
    "TARGET_TIMEOUT_MS",
]
