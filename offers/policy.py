"""
Purpose: Central configuration for live offer scoring + driver preferences.
What it does:

OfferPolicy stores the tunable constants of the offer scorer:

SPEED_KM_PER_MIN = 0.45          (distance estimate when none is given)
MIN_SAMPLES = 5, STRONG_SAMPLES = 15
POST_DEST_WEIGHT = MEDIUM 0.2 / STRONG 0.3
BUCKET_RECENT_DAYS = 30, MONEY_PROOF_WINDOW_HOURS = 2

DriverSettings stores what the driver tunes for themselves (target rate, costs).

Rule: No logic here—just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class OfferPolicy:
    """
    Live offer scorer configuration.
    """

    # --- Distance estimate ---
    # Used when the offer does not state a distance (city average ~27 km/h).
    speed_km_per_min: float = 0.45

    # --- Sample-count confidence ---
    min_samples: int = 5
    strong_samples: int = 15

    # --- Blend of immediate hourly vs historical yield at the destination ---
    medium_post_dest_weight: float = 0.2
    strong_post_dest_weight: float = 0.3

    # Decline reasons mention costs above this share of the fare.
    high_cost_share: float = 0.3

    # --- Store aggregation windows ---
    recent_window_days: int = 30
    money_proof_window_hours: int = 2

    model_version: str = "v1"

    def validate(self) -> None:
        if self.speed_km_per_min <= 0:
            raise ValueError("speed_km_per_min must be > 0")
        if not 0 < self.min_samples < self.strong_samples:
            raise ValueError("Sample thresholds must satisfy 0 < min_samples < strong_samples")
        for weight in (self.medium_post_dest_weight, self.strong_post_dest_weight):
            if not 0 <= weight < 1:
                raise ValueError("Post-destination weights must be within [0, 1)")
        if self.recent_window_days <= 0 or self.money_proof_window_hours <= 0:
            raise ValueError("Aggregation windows must be > 0")


def default_offer_policy() -> OfferPolicy:
    p = OfferPolicy()
    p.validate()
    return p


@dataclass(frozen=True)
class DriverSettings:
    """
    Per-driver targets. Amounts in PLN.
    """

    target_hourly_pln: float = 90.0
    cost_per_km_pln: float = 0.70

    # 0.10 = accept offers down to 90% of the target.
    tolerance_percent: float = 0.10

    # 0 = cautious, 1 = aggressive. Stored for the UI; the scorer does not read it yet.
    risk_preference: float = 0.5

    @property
    def min_acceptable_hourly(self) -> float:
        return self.target_hourly_pln * (1 - self.tolerance_percent)

    def validate(self) -> None:
        if self.target_hourly_pln <= 0:
            raise ValueError("target_hourly_pln must be > 0")
        if self.cost_per_km_pln < 0:
            raise ValueError("cost_per_km_pln must be >= 0")
        if not 0 <= self.tolerance_percent < 1:
            raise ValueError("tolerance_percent must be within [0, 1)")
        if not 0 <= self.risk_preference <= 1:
            raise ValueError("risk_preference must be within [0, 1]")


def default_driver_settings() -> DriverSettings:
    s = DriverSettings()
    s.validate()
    return s
