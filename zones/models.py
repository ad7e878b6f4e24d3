"""
Purpose: Core data models for the zones domain.
What it does:
Defines a Zone (named catchment area with behavioural defaults) and the
hysteresis state the detector threads through a stream of GPS samples.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

LatLng = Tuple[float, float]


class ZoneCategory(str, Enum):
    AIRPORT = "airport"
    CENTER = "center"
    RESIDENTIAL = "residential"


class ZoneBias(str, Enum):
    DAYTIME = "daytime"
    LATE_NIGHT = "late-night"
    COMMUTER = "commuter"
    MIXED = "mixed"


@dataclass(frozen=True)
class Zone:
    """
    Immutable reference data, loaded once with the catalog.
    """
    id: str
    name: str
    category: ZoneCategory
    center: LatLng
    radius_km: float
    primary_bias: ZoneBias
    default_stay_until_min: int
    default_leave_if_min: int
    suggested_next_zones: Tuple[str, str]

    @classmethod
    def new(
        cls,
        zone_id: str,
        name: str,
        category: str | ZoneCategory,
        lat: float,
        lng: float,
        radius_km: float,
        primary_bias: str | ZoneBias = ZoneBias.MIXED,
        stay_until_min: int = 5,
        leave_if_min: int = 10,
        suggested_next_zones: Tuple[str, str] = ("", ""),
    ) -> Zone:
        if isinstance(category, str):
            category = ZoneCategory(category)
        if isinstance(primary_bias, str):
            primary_bias = ZoneBias(primary_bias)

        return cls(
            id=zone_id,
            name=name,
            category=category,
            center=(lat, lng),
            radius_km=radius_km,
            primary_bias=primary_bias,
            default_stay_until_min=stay_until_min,
            default_leave_if_min=leave_if_min,
            suggested_next_zones=tuple(suggested_next_zones),
        )


@dataclass(frozen=True)
class ZoneState:
    """
    Hysteresis state for one driver. All fields are None initially.
    Transitions never mutate an instance; they return a new one.
    """
    current_zone_id: Optional[str] = None
    pending_zone_id: Optional[str] = None
    pending_since_ms: Optional[int] = None


INITIAL_ZONE_STATE = ZoneState()
