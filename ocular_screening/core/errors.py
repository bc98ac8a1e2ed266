"""
Error taxonomy for the ocular pipeline.

Every error here is recovered locally; callers see degraded data fields,
never a raised exception from OcularPipeline.process_frame().
"""


class OcularError(Exception):
    """Base class for pipeline errors."""


class DataGapError(OcularError):
    """No landmarks this tick (face lost, detector returned nothing, extraction failed)."""


class DegenerateGeometryError(OcularError):
    """Eye geometry collapsed to zero size; a fallback value is used instead."""


class InsufficientHistoryError(OcularError):
    """Classifier asked to run before enough samples accumulated."""

    def __init__(self, available: int, required: int):
        self.available = available
        self.required = required
        super().__init__(f"{available} samples available, {required} required")


class ExternalEnhancementFailure(OcularError):
    """Narration or downstream publishing failed; algorithmic result stands."""


class CalibrationError(OcularError):
    """Calibration requested without a usable face sample."""
