"""
Purpose: Static catalog of the Krakow zones and lookup helpers.
What it does:
Holds the ordered zone list used by detection (catalog order breaks ties),
scoring (category lookup) and idle guidance (stay/leave thresholds,
suggested next zones).
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .models import Zone, ZoneCategory

KRAKOW_ZONES: List[Zone] = [
    Zone.new("stare-miasto", "Stare Miasto", "center", 50.0614, 19.9372, 1.2, "mixed", 8, 15, ("kazimierz", "grzegorzki")),
    Zone.new("kazimierz", "Kazimierz", "center", 50.0508, 19.9447, 0.8, "late-night", 10, 18, ("stare-miasto", "podgorze")),
    Zone.new("grzegorzki", "Grzegórzki", "center", 50.0656, 19.9686, 1.0, "daytime", 6, 12, ("stare-miasto", "czyzyny")),
    Zone.new("podgorze", "Podgórze", "residential", 50.0408, 19.9544, 1.5, "commuter", 5, 10, ("kazimierz", "lagiewniki-borek")),
    Zone.new("podgorze-duchackie", "Podgórze Duchackie", "residential", 50.0186, 19.9638, 1.8, "commuter", 4, 8, ("podgorze", "lagiewniki-borek")),
    Zone.new("krowodrza", "Krowodrza", "residential", 50.0789, 19.9156, 1.5, "daytime", 5, 10, ("stare-miasto", "bronowice")),
    Zone.new("pradnik-bialy", "Prądnik Biały", "residential", 50.1042, 19.9269, 2.0, "commuter", 4, 8, ("krowodrza", "pradnik-czerwony")),
    Zone.new("pradnik-czerwony", "Prądnik Czerwony", "residential", 50.0972, 19.9683, 1.8, "commuter", 4, 8, ("pradnik-bialy", "mistrzejowice")),
    Zone.new("czyzyny", "Czyżyny", "residential", 50.0711, 20.0086, 1.5, "mixed", 5, 10, ("grzegorzki", "nowa-huta")),
    Zone.new("mistrzejowice", "Mistrzejowice", "residential", 50.1056, 20.0128, 1.5, "commuter", 4, 8, ("pradnik-czerwony", "bienczyce")),
    Zone.new("bienczyce", "Bieńczyce", "residential", 50.0917, 20.0344, 1.5, "commuter", 4, 8, ("mistrzejowice", "nowa-huta")),
    Zone.new("nowa-huta", "Nowa Huta", "residential", 50.0711, 20.0419, 2.5, "mixed", 5, 12, ("czyzyny", "bienczyce")),
    Zone.new("bronowice", "Bronowice", "residential", 50.0833, 19.8875, 1.5, "daytime", 4, 8, ("krowodrza", "zwierzyniec")),
    Zone.new("zwierzyniec", "Zwierzyniec", "residential", 50.0583, 19.8667, 2.0, "daytime", 5, 10, ("bronowice", "debniki")),
    Zone.new("debniki", "Dębniki", "residential", 50.0414, 19.9128, 1.8, "mixed", 5, 10, ("zwierzyniec", "lagiewniki-borek")),
    Zone.new("lagiewniki-borek", "Łagiewniki–Borek Fałęcki", "residential", 50.0156, 19.9233, 2.0, "commuter", 4, 8, ("debniki", "podgorze-duchackie")),
    Zone.new("ruczaj", "Ruczaj", "residential", 50.0258, 19.8883, 1.5, "commuter", 4, 8, ("debniki", "lagiewniki-borek")),
    Zone.new("airport", "Airport / Balice", "airport", 50.0778, 19.7847, 2.5, "mixed", 10, 20, ("bronowice", "krowodrza")),
]

_ZONES_BY_ID: Dict[str, Zone] = {zone.id: zone for zone in KRAKOW_ZONES}


def get_zone_by_id(zone_id: str, zones: Optional[Sequence[Zone]] = None) -> Optional[Zone]:
    if zones is None:
        return _ZONES_BY_ID.get(zone_id)
    for zone in zones:
        if zone.id == zone_id:
            return zone
    return None


def get_zone_name(zone_id: str) -> str:
    """Display name, or the id itself for zones outside the catalog."""
    zone = get_zone_by_id(zone_id)
    return zone.name if zone else zone_id


def get_zone_category(zone_id: str) -> Optional[ZoneCategory]:
    zone = get_zone_by_id(zone_id)
    return zone.category if zone else None


def get_all_zone_ids() -> List[str]:
    return [zone.id for zone in KRAKOW_ZONES]


def get_all_zone_names() -> List[Dict[str, str]]:
    return [{"id": zone.id, "name": zone.name} for zone in KRAKOW_ZONES]
