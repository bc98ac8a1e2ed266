"""
Discrete eye events: blinks, saccades, fixations.

Blink and fixation checks are stateless. Saccade detection keeps the time of
the last flagged saccade so rapid oscillation is debounced.
"""
from typing import Optional

from ocular_screening.config import Settings, get_settings
from ocular_screening.utils import get_logger

logger = get_logger(__name__)


class EventDetector:
    """Threshold-based event classification for one capture session."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._last_saccade_s: Optional[float] = None
        self.saccade_count = 0

    def is_blink(self, average_openness: float) -> bool:
        return average_openness < self.settings.blink_threshold

    def detect_saccade(self, velocity: float, movement: float, timestamp_s: float) -> bool:
        """
        Flag a saccade when both velocity and displacement exceed their
        thresholds and the refractory period since the last flag has passed.
        """
        s = self.settings
        if velocity <= s.saccade_velocity_threshold or movement <= s.saccade_min_movement:
            return False
        if self._last_saccade_s is not None and (timestamp_s - self._last_saccade_s) <= s.saccade_refractory_s:
            logger.debug(f"Saccade suppressed at t={timestamp_s:.3f}s (refractory)")
            return False

        self._last_saccade_s = timestamp_s
        self.saccade_count += 1
        return True

    def is_fixation(self, movement: float, saccade_detected: bool) -> bool:
        return not saccade_detected and movement < self.settings.fixation_movement_threshold

    @property
    def last_saccade_s(self) -> Optional[float]:
        return self._last_saccade_s

    def reset(self) -> None:
        self._last_saccade_s = None
        self.saccade_count = 0
