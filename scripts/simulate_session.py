import asyncio
import json
import os
import sys
from datetime import datetime
from typing import Any, Dict

# Add project root to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from ocular_screening.core.extraction.synthetic import (
    erratic_sequence, noisy_sequence, random_gaze_sequence, stable_sequence,
)
from ocular_screening.core.tasks.saccadic import SaccadicTestResult
from ocular_screening.services.session import ScreeningSession
from ocular_screening.utils import configure_logging, get_logger

logger = get_logger("simulate_session")

FRAMES = 120
SCENARIOS = {
    "stable": lambda: stable_sequence(FRAMES),
    "erratic": lambda: erratic_sequence(FRAMES),
    "noisy": lambda: noisy_sequence(FRAMES, seed=7),
    "random": lambda: random_gaze_sequence(FRAMES, seed=7),
}


class PrintSink:
    """Keeps the last report and prints a one-line summary for every 30th."""

    def __init__(self):
        self.count = 0
        self.last: Dict[str, Any] = {}

    async def publish(self, report: Dict[str, Any]) -> None:
        self.count += 1
        self.last = report
        if self.count % 30 == 0:
            a = report["assessment"]
            print(f"  report #{self.count}: risk={a['risk_category']} confidence={a['confidence']:.2f}")


async def simulate(scenario: str) -> None:
    print(f"[{datetime.now()}] Simulating '{scenario}' session ({FRAMES} frames)...")
    sink = PrintSink()

    async with ScreeningSession(sinks=[sink]) as session:
        for i, frame in enumerate(SCENARIOS[scenario]()):
            # Face lost for a few frames midway
            await session.process_frame(None if 60 <= i < 64 else frame)
            if i == 10:
                session.calibrate()

        await session.drain()

        result = SaccadicTestResult.from_trials([340, 360, 310, 395, 350, 330, 380, 345], targets_shown=12)
        assessment = await session.submit_test_result(result)
        await session.drain()

        print(f"\nAfter saccadic test: risk={assessment.risk_category.value} confidence={assessment.confidence:.2f}")
        print(json.dumps(session.get_stats(), indent=2))
        print(json.dumps(sink.last, indent=2))


if __name__ == "__main__":
    configure_logging("INFO")
    name = sys.argv[1] if len(sys.argv) > 1 else "stable"
    if name not in SCENARIOS:
        print(f"Unknown scenario '{name}'. Choose from: {', '.join(SCENARIOS)}")
        sys.exit(1)
    asyncio.run(simulate(name))
