"""
Purpose: Map raw GPS samples to catalog zones.
What it does:
- detect_zone_once: great-circle containment test against every zone centroid.
  Among containing zones the one with the largest margin (radius - distance)
  wins; ties break by catalog order.
- find_nearest_zone: containing zone if any, else the closest centroid.
- detect_zone_with_hysteresis: pure (state, sample) -> state transition that
  debounces boundary flicker. A driver must stay in a new zone for the whole
  stability window before the transition is committed.

Callers must feed samples for one driver sequentially; the state object is
not safe against out-of-order updates.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from .models import Zone, ZoneState
from .policy import ZoneDetectionPolicy, default_detection_policy
from .registry import KRAKOW_ZONES


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float, radius_km: float = 6371.0) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return radius_km * c


def detect_zone_once(lat: float, lng: float, zones: Sequence[Zone] = KRAKOW_ZONES) -> Optional[str]:
    """
    Returns the id of the zone that contains the point most deeply, or None.
    """
    candidates: List[Tuple[float, int, str]] = []

    for index, zone in enumerate(zones):
        distance = haversine_km(lat, lng, zone.center[0], zone.center[1])
        if distance <= zone.radius_km:
            candidates.append((zone.radius_km - distance, index, zone.id))

    if not candidates:
        return None

    # largest containment first, then lowest catalog index
    candidates.sort(key=lambda candidate: (-candidate[0], candidate[1]))
    return candidates[0][2]


def find_nearest_zone(lat: float, lng: float, zones: Sequence[Zone] = KRAKOW_ZONES) -> Optional[Zone]:
    """
    Zone containing the point, falling back to the closest centroid.
    Only None when the catalog is empty.
    """
    if not zones:
        return None

    contained = detect_zone_once(lat, lng, zones)
    if contained is not None:
        return next(zone for zone in zones if zone.id == contained)

    return min(
        zones,
        key=lambda zone: haversine_km(lat, lng, zone.center[0], zone.center[1]),
    )


def detect_zone_with_hysteresis(
    lat: float,
    lng: float,
    accuracy_m: float,
    now_ms: int,
    state: ZoneState,
    zones: Sequence[Zone] = KRAKOW_ZONES,
    policy: Optional[ZoneDetectionPolicy] = None,
) -> ZoneState:
    """
    One step of the zone state machine.

    - accuracy worse than the ceiling: state returned untouched
    - no containing zone: pending cleared, current kept
    - candidate == current: pending cleared
    - candidate != pending: new pending transition starting now
    - candidate == pending for >= stable window: commit
    """
    policy = policy or default_detection_policy()

    if accuracy_m > policy.accuracy_max_m:
        return state

    candidate = detect_zone_once(lat, lng, zones)

    if candidate is None:
        return replace(state, pending_zone_id=None, pending_since_ms=None)

    if candidate == state.current_zone_id:
        return replace(state, pending_zone_id=None, pending_since_ms=None)

    if candidate != state.pending_zone_id:
        return replace(state, pending_zone_id=candidate, pending_since_ms=now_ms)

    if state.pending_since_ms is not None and now_ms - state.pending_since_ms >= policy.stable_ms:
        return ZoneState(current_zone_id=candidate, pending_zone_id=None, pending_since_ms=None)

    return state
