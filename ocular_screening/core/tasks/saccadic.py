"""
Saccadic Target Test

Structured reaction task: a target appears at one of nine grid positions,
the subject responds (or the target times out), repeated for a fixed number
of trials. The resulting latency and accuracy can escalate a risk assessment.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ocular_screening.utils import get_logger

logger = get_logger(__name__)

TARGETS_PER_TEST = 12
TARGET_TIMEOUT_MS = 2000.0


@dataclass(frozen=True)
class GridTarget:
    """Target position in percent of the display."""
    x: float
    y: float
    label: str


GRID_POSITIONS: Tuple[GridTarget, ...] = tuple(
    GridTarget(x=x, y=y, label=f"{col}{row}")
    for row, y in enumerate((20.0, 50.0, 80.0), start=1)
    for col, x in zip("ABC", (20.0, 50.0, 80.0))
)


@dataclass(frozen=True)
class SaccadicTestResult:
    """Outcome of one completed test."""
    average_latency_ms: float
    accuracy_percent: float
    per_trial_latencies_ms: Tuple[float, ...] = ()
    targets_shown: int = 0

    @classmethod
    def from_trials(cls, latencies_ms: Sequence[float], targets_shown: int) -> "SaccadicTestResult":
        """Mean latency of answered trials; accuracy is answered / shown."""
        latencies = tuple(float(v) for v in latencies_ms)
        average = float(np.mean(latencies)) if latencies else 0.0
        accuracy = len(latencies) / targets_shown * 100.0 if targets_shown > 0 else 0.0
        return cls(
            average_latency_ms=average,
            accuracy_percent=accuracy,
            per_trial_latencies_ms=latencies,
            targets_shown=targets_shown,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "average_latency_ms": round(self.average_latency_ms, 1),
            "accuracy_percent": round(self.accuracy_percent, 1),
            "per_trial_latencies_ms": list(self.per_trial_latencies_ms),
            "targets_shown": self.targets_shown,
        }


@dataclass
class SaccadicTest:
    """
    Drives one run of the target test.

    The host shows `next_target()`, then reports either `record_response()`
    with the measured reaction time or `record_miss()` on timeout.
    """
    trials: int = TARGETS_PER_TEST
    timeout_ms: float = TARGET_TIMEOUT_MS
    seed: Optional[int] = None
    _rng: np.random.Generator = field(init=False, repr=False)
    _current: Optional[GridTarget] = field(default=None, init=False)
    _shown: List[GridTarget] = field(default_factory=list, init=False)
    _latencies: List[float] = field(default_factory=list, init=False)
    _awaiting: bool = field(default=False, init=False)

    def __post_init__(self):
        self._rng = np.random.default_rng(self.seed)

    @property
    def is_complete(self) -> bool:
        return len(self._shown) >= self.trials and not self._awaiting

    @property
    def current_target(self) -> Optional[GridTarget]:
        return self._current if self._awaiting else None

    @property
    def progress(self) -> float:
        return min(100.0, len(self._shown) / self.trials * 100.0)

    def next_target(self) -> GridTarget:
        """Pick a grid position different from the previous one."""
        if self._awaiting:
            raise RuntimeError("Previous target has not been answered or timed out")
        if len(self._shown) >= self.trials:
            raise RuntimeError("Test already complete")

        while True:
            target = GRID_POSITIONS[int(self._rng.integers(len(GRID_POSITIONS)))]
            if target != self._current:
                break

        self._current = target
        self._shown.append(target)
        self._awaiting = True
        return target

    def record_response(self, latency_ms: float) -> None:
        if not self._awaiting:
            raise RuntimeError("No target is awaiting a response")
        self._awaiting = False
        if latency_ms < 0 or latency_ms > self.timeout_ms:
            logger.debug(f"Response at {latency_ms:.0f} ms outside 0..{self.timeout_ms:.0f} ms counted as miss")
            return
        self._latencies.append(float(latency_ms))

    def record_miss(self) -> None:
        if not self._awaiting:
            raise RuntimeError("No target is awaiting a response")
        self._awaiting = False

    def result(self) -> SaccadicTestResult:
        """Result so far; complete once `is_complete` is True."""
        return SaccadicTestResult.from_trials(self._latencies, len(self._shown))

    @property
    def targets(self) -> Tuple[GridTarget, ...]:
        return tuple(self._shown)
