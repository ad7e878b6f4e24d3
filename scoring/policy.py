"""
Purpose: Central configuration for every scoring model (single source of truth).
What it does:

Stores all tunable tables and thresholds:

- time-regime band boundaries (5 bands, late-night wraps past midnight)
- benchmark feature weights, seasonality / congestion / deadhead tables,
  platform priors, softmax defaults, confidence thresholds
- personal-mode thresholds (decay horizon, minimum records, normalisers)

The numbers are hand-tuned configuration data, not derived from observations.
Rule: No logic here—just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from zones.models import ZoneCategory

from .models import DayMode, Platform, TimeRegime

# (regime, start_hour, end_hour) with half-open [start, end). start > end wraps midnight.
RegimeBand = Tuple[TimeRegime, float, float]

_AIRPORT = ZoneCategory.AIRPORT
_CENTER = ZoneCategory.CENTER
_RESIDENTIAL = ZoneCategory.RESIDENTIAL

_MORNING = TimeRegime.MORNING_RUSH
_MIDDAY = TimeRegime.MIDDAY
_EVENING = TimeRegime.EVENING_RUSH
_LATE = TimeRegime.LATE_NIGHT
_OVERNIGHT = TimeRegime.OVERNIGHT


@dataclass(frozen=True)
class TimeRegimePolicy:
    """
    Ordered band set covering the 24h clock with no gaps or overlaps.
    """

    bands: List[RegimeBand] = field(default_factory=lambda: [
        (_MORNING, 5.0, 9.0),
        (_MIDDAY, 9.0, 15.0),
        (_EVENING, 15.0, 19.0),
        (_LATE, 19.0, 1.0),
        (_OVERNIGHT, 1.0, 5.0),
    ])

    # Friday from this hour counts as weekend.
    friday_weekend_from_hour: float = 20.0

    def validate(self) -> None:
        if not self.bands:
            raise ValueError("At least one time-regime band is required.")

        # every minute of the day must fall into exactly one band
        for minute in range(24 * 60):
            hour = minute / 60
            hits = sum(1 for _, start, end in self.bands if _in_band(hour, start, end))
            if hits != 1:
                raise ValueError(f"Time-regime bands cover {hour:.2f}h {hits} times (expected 1).")

        if not 0 <= self.friday_weekend_from_hour < 24:
            raise ValueError("friday_weekend_from_hour must be within [0, 24)")


def _in_band(hour: float, start: float, end: float) -> bool:
    if start < end:
        return start <= hour < end
    return hour >= start or hour < end


def default_regime_policy() -> TimeRegimePolicy:
    p = TimeRegimePolicy()
    p.validate()
    return p


def _default_seasonality() -> Dict[ZoneCategory, Dict[DayMode, Dict[TimeRegime, float]]]:
    return {
        # commuter peaks on both ends of the working day, dead overnight
        _AIRPORT: {
            DayMode.WEEKDAY: {_MORNING: 1.8, _MIDDAY: 1.2, _EVENING: 1.6, _LATE: 1.0, _OVERNIGHT: 0.6},
            DayMode.WEEKEND: {_MORNING: 1.5, _MIDDAY: 1.2, _EVENING: 1.4, _LATE: 0.9, _OVERNIGHT: 0.6},
        },
        # office rush on weekdays, nightlife on weekends
        _CENTER: {
            DayMode.WEEKDAY: {_MORNING: 1.6, _MIDDAY: 1.3, _EVENING: 1.8, _LATE: 0.8, _OVERNIGHT: 0.5},
            DayMode.WEEKEND: {_MORNING: 0.8, _MIDDAY: 1.5, _EVENING: 1.5, _LATE: 2.0, _OVERNIGHT: 1.2},
        },
        _RESIDENTIAL: {
            DayMode.WEEKDAY: {_MORNING: 1.5, _MIDDAY: 0.9, _EVENING: 1.4, _LATE: 0.6, _OVERNIGHT: 0.4},
            DayMode.WEEKEND: {_MORNING: 0.7, _MIDDAY: 0.9, _EVENING: 1.1, _LATE: 0.7, _OVERNIGHT: 0.4},
        },
    }


def _default_congestion() -> Dict[ZoneCategory, List[float]]:
    # index = hour of day
    return {
        _AIRPORT: [
            0.1, 0.1, 0.1, 0.1, 0.2, 0.4, 0.6, 0.8, 0.9, 0.7, 0.5, 0.4,
            0.5, 0.5, 0.5, 0.6, 0.7, 0.8, 0.8, 0.6, 0.4, 0.3, 0.2, 0.1,
        ],
        _CENTER: [
            0.1, 0.1, 0.1, 0.1, 0.1, 0.2, 0.4, 0.7, 0.9, 0.8, 0.6, 0.6,
            0.7, 0.7, 0.6, 0.6, 0.7, 0.9, 0.9, 0.7, 0.5, 0.4, 0.3, 0.2,
        ],
        _RESIDENTIAL: [
            0.1, 0.1, 0.1, 0.1, 0.1, 0.2, 0.3, 0.5, 0.6, 0.4, 0.3, 0.3,
            0.3, 0.3, 0.3, 0.4, 0.5, 0.6, 0.5, 0.4, 0.3, 0.2, 0.1, 0.1,
        ],
    }


@dataclass(frozen=True)
class RankingPolicy:
    """
    Benchmark model configuration.

    score = w1*demand - w2*friction + w3*incentive + w4*reliability
    demand = a1*event + a2*weather + a3*seasonality
    friction = b1*congestion + b2*deadhead_risk
    """

    # --- Score weights (demand dominant, friction penalised) ---
    w1: float = 1.0
    w2: float = 0.8
    w3: float = 0.5
    w4: float = 0.3

    # --- Demand weights ---
    a1: float = 0.4
    a2: float = 0.3
    a3: float = 0.3

    # --- Friction weights ---
    b1: float = 0.6
    b2: float = 0.4

    # Extension points; no live feed yet.
    event_multiplier: float = 1.0
    weather_multiplier: float = 1.0

    seasonality: Dict[ZoneCategory, Dict[DayMode, Dict[TimeRegime, float]]] = field(
        default_factory=_default_seasonality
    )
    congestion: Dict[ZoneCategory, List[float]] = field(default_factory=_default_congestion)

    # Empty-return risk: airport low, residential high.
    deadhead_risk: Dict[ZoneCategory, float] = field(default_factory=lambda: {
        _AIRPORT: 0.3,
        _CENTER: 0.2,
        _RESIDENTIAL: 0.6,
    })

    incentive_priors: Dict[Platform, Dict[ZoneCategory, float]] = field(default_factory=lambda: {
        Platform.BOLT: {_AIRPORT: 0.10, _CENTER: 0.20, _RESIDENTIAL: 0.15},
        Platform.UBER: {_AIRPORT: 0.15, _CENTER: 0.10, _RESIDENTIAL: 0.10},
        Platform.FREENOW: {_AIRPORT: 0.05, _CENTER: 0.15, _RESIDENTIAL: 0.20},
    })

    reliability_priors: Dict[Platform, float] = field(default_factory=lambda: {
        Platform.BOLT: 0.1,
        Platform.UBER: 0.2,
        Platform.FREENOW: 0.0,
    })

    # --- Softmax / confidence ---
    default_temperature: float = 1.0
    strong_gap: float = 0.30
    medium_gap: float = 0.15

    # --- Display levels for the demand / friction components ---
    demand_high: float = 1.2
    demand_medium: float = 0.8
    friction_high: float = 0.6
    friction_medium: float = 0.3

    def validate(self) -> None:
        for category in ZoneCategory:
            if category not in self.seasonality:
                raise ValueError(f"Missing seasonality table for {category.value}")
            for day_mode in DayMode:
                row = self.seasonality[category].get(day_mode, {})
                missing = [regime.value for regime in TimeRegime if regime not in row]
                if missing:
                    raise ValueError(f"Seasonality {category.value}/{day_mode.value} missing {missing}")
            if len(self.congestion.get(category, [])) != 24:
                raise ValueError(f"Congestion table for {category.value} must have 24 hourly values")
            if category not in self.deadhead_risk:
                raise ValueError(f"Missing deadhead risk for {category.value}")

        for platform in Platform:
            if platform not in self.reliability_priors:
                raise ValueError(f"Missing reliability prior for {platform.value}")
            if set(self.incentive_priors.get(platform, {})) != set(ZoneCategory):
                raise ValueError(f"Incentive priors for {platform.value} must cover every zone category")

        if self.default_temperature <= 0:
            raise ValueError("default_temperature must be > 0")
        if not 0 <= self.medium_gap <= self.strong_gap <= 1:
            raise ValueError("Confidence gaps must satisfy 0 <= medium <= strong <= 1")


def default_ranking_policy() -> RankingPolicy:
    p = RankingPolicy()
    p.validate()
    return p


@dataclass(frozen=True)
class PersonalPolicy:
    """
    Personal (history-based) scoring thresholds.
    """

    # exp(-days / decay_days): a 30 day old trip weighs ~37% of today's.
    decay_days: float = 30.0

    # Total matching trips across platforms before personal mode is trusted.
    min_records: int = 5

    # Duration must be present in more than this share of trips.
    duration_share_required: float = 0.5

    # Normalisers that bring PLN figures onto the benchmark score scale.
    rev_per_hour_norm: float = 50.0
    earnings_per_trip_norm: float = 30.0

    # Boost for platforms with more personal data: min(trips / divisor, cap).
    boost_divisor: float = 20.0
    boost_cap: float = 0.2

    strong_gap: float = 0.25
    medium_gap: float = 0.10

    def validate(self) -> None:
        if self.decay_days <= 0:
            raise ValueError("decay_days must be > 0")
        if self.min_records < 1:
            raise ValueError("min_records must be >= 1")
        if not 0 <= self.duration_share_required < 1:
            raise ValueError("duration_share_required must be within [0, 1)")
        if self.rev_per_hour_norm <= 0 or self.earnings_per_trip_norm <= 0:
            raise ValueError("Normalisers must be > 0")
        if not 0 <= self.medium_gap <= self.strong_gap <= 1:
            raise ValueError("Confidence gaps must satisfy 0 <= medium <= strong <= 1")


def default_personal_policy() -> PersonalPolicy:
    p = PersonalPolicy()
    p.validate()
    return p
