"""
Purpose: Domain models for the scoring capability.
What it does:
- Defines enums shared by every scorer:
  Platform = bolt | uber | freenow
  DayMode = WEEKDAY | WEEKEND
  TimeRegime = morning-rush | midday | evening-rush | late-night | overnight
  ConfidenceLevel = Strong | Medium | Weak
- Defines the records flowing between scorers:
  Context, PlatformScore, RankingResult, EarningsLog

Rule: No scoring math here. Models only.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class Platform(str, Enum):
    BOLT = "bolt"
    UBER = "uber"
    FREENOW = "freenow"


PLATFORMS: List[Platform] = [Platform.BOLT, Platform.UBER, Platform.FREENOW]

PLATFORM_DISPLAY_NAMES = {
    Platform.BOLT: "Bolt",
    Platform.UBER: "Uber",
    Platform.FREENOW: "FreeNow",
}


def get_platform_display_name(platform: str | Platform) -> str:
    return PLATFORM_DISPLAY_NAMES[Platform(platform)]


def get_all_platforms() -> List[Platform]:
    return list(PLATFORMS)


class DayMode(str, Enum):
    WEEKDAY = "WEEKDAY"
    WEEKEND = "WEEKEND"


class TimeRegime(str, Enum):
    MORNING_RUSH = "morning-rush"
    MIDDAY = "midday"
    EVENING_RUSH = "evening-rush"
    LATE_NIGHT = "late-night"
    OVERNIGHT = "overnight"


class ConfidenceLevel(str, Enum):
    STRONG = "Strong"
    MEDIUM = "Medium"
    WEAK = "Weak"


@dataclass(frozen=True)
class Context:
    """
    Discrete time-of-week bucket. Derived from a timestamp, never stored.
    """
    day_mode: DayMode
    time_regime: TimeRegime

    @property
    def day_type(self) -> str:
        # lowercase spelling used by the offer store
        return "weekend" if self.day_mode == DayMode.WEEKEND else "weekday"

    @property
    def weekend_mode(self) -> bool:
        return self.day_mode == DayMode.WEEKEND


@dataclass
class PlatformScore:
    platform: Platform
    score: float
    probability: float
    demand_score: float
    friction_score: float
    incentive_score: float
    reliability_score: float

    def components(self) -> dict:
        return {
            "demand": self.demand_score,
            "friction": self.friction_score,
            "incentive": self.incentive_score,
            "reliability": self.reliability_score,
        }


@dataclass
class RankingResult:
    """
    Ranked platforms, best first.
    confidence_value = probability gap between the top two platforms.
    """
    rankings: List[PlatformScore]
    top_platform: Platform
    confidence: ConfidenceLevel
    confidence_value: float
    context: Context


@dataclass(frozen=True)
class EarningsLog:
    """
    One completed trip as logged by the driver (manual entry or receipt import).
    """
    platform: Platform
    amount: float
    zone: str
    timestamp: int  # epoch ms
    duration: Optional[float] = None  # minutes
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @classmethod
    def new(
        cls,
        platform: str | Platform,
        amount: float,
        zone: str,
        timestamp: int,
        duration: Optional[float] = None,
        log_id: Optional[str] = None,
    ) -> EarningsLog:
        return cls(
            platform=Platform(platform),
            amount=float(amount),
            zone=zone,
            timestamp=int(timestamp),
            duration=duration,
            id=log_id or str(uuid.uuid4()),
        )
