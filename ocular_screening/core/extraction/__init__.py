"""
Eye Geometry Extraction Module

Converts FaceMesh-style landmark frames into per-frame eye geometry.
"""
from .base import (
    Landmark, LandmarkFrame, EyeLandmarkIndices, EyeGeometry, FrameGeometry,
    LEFT_EYE, RIGHT_EYE, REQUIRED_LANDMARKS,
)
from .geometry import GeometryExtractor, eye_aspect_ratio, pupil_centroid, DEFAULT_EAR

__all__ = [
    "Landmark",
    "LandmarkFrame",
    "EyeLandmarkIndices",
    "EyeGeometry",
    "FrameGeometry",
    "LEFT_EYE",
    "RIGHT_EYE",
    "REQUIRED_LANDMARKS",
    "GeometryExtractor",
    "eye_aspect_ratio",
    "pupil_centroid",
    "DEFAULT_EAR",
]
