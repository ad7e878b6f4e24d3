"""
Zones domain package.

Public API:
- Domain models: Zone, ZoneCategory, ZoneBias, ZoneState
- Catalog: KRAKOW_ZONES and lookup helpers
- Detection: detect_zone_once, find_nearest_zone, detect_zone_with_hysteresis
"""
from .models import INITIAL_ZONE_STATE, Zone, ZoneBias, ZoneCategory, ZoneState
from .registry import (
    KRAKOW_ZONES,
    get_all_zone_ids,
    get_all_zone_names,
    get_zone_by_id,
    get_zone_category,
    get_zone_name,
)
from .detector import detect_zone_once, detect_zone_with_hysteresis, find_nearest_zone, haversine_km
from .policy import ZoneDetectionPolicy, default_detection_policy

__all__ = [
    "INITIAL_ZONE_STATE",
    "Zone",
    "ZoneBias",
    "ZoneCategory",
    "ZoneState",
    "KRAKOW_ZONES",
    "get_all_zone_ids",
    "get_all_zone_names",
    "get_zone_by_id",
    "get_zone_category",
    "get_zone_name",
    "detect_zone_once",
    "detect_zone_with_hysteresis",
    "find_nearest_zone",
    "haversine_km",
    "ZoneDetectionPolicy",
    "default_detection_policy",
]
