"""
Purpose: Central configuration for zone detection.
What it does:

Stores the tunable thresholds for turning raw GPS samples into zone transitions:

ACCURACY_MAX_M = 80
STABLE_MS = 25_000

Rule: No logic here—just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ZoneDetectionPolicy:
    """
    Thresholds for the hysteresis detector.
    """

    # Samples reported with a worse horizontal accuracy are ignored entirely.
    accuracy_max_m: float = 80.0

    # A new candidate zone must be observed continuously for this long
    # before it replaces the current zone.
    stable_ms: int = 25_000

    def validate(self) -> None:
        if self.accuracy_max_m <= 0:
            raise ValueError("accuracy_max_m must be > 0")
        if self.stable_ms < 0:
            raise ValueError("stable_ms must be >= 0")


def default_detection_policy() -> ZoneDetectionPolicy:
    p = ZoneDetectionPolicy()
    p.validate()
    return p
