"""
Ocular Screening Pipeline

Streaming eye-movement analysis producing cognitive screening indicators
from facial landmark frames. Not a diagnostic device.
"""
from ocular_screening.config import Settings, get_settings

__version__ = "0.1.0"

__all__ = ["Settings", "get_settings", "__version__"]
