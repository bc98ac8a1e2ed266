"""
Core eye-metric processing: extraction, tracking, inference, tasks, narration.
"""
from .pipeline import OcularPipeline, FrameResult

__all__ = ["OcularPipeline", "FrameResult"]
