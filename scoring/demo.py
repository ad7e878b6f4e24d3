"""
Purpose: Demo benchmark dataset for showing the app before any trips are logged.
What it does:
- Generates one record per (platform, zone category, day mode, time regime)
  from rough Krakow market figures (gross hourly, commission, trips per hour)
- Adds seeded random variation so values look organic but are reproducible
- Scores a record as an "opportunity" in [0, 1]

Rule: The dataset is an explicit object. Build one, pass it around, rebuild it to regenerate.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, List, Optional

from zones.models import ZoneCategory

from .models import DayMode, PLATFORMS, Platform, TimeRegime

_AIRPORT = ZoneCategory.AIRPORT
_CENTER = ZoneCategory.CENTER
_RESIDENTIAL = ZoneCategory.RESIDENTIAL


@dataclass(frozen=True)
class PlatformBenchmark:
    hourly_gross_min: float
    hourly_gross_max: float
    commission: float
    trips_per_hour: float
    avg_trip_duration: float

    @property
    def net_hourly(self) -> float:
        return (self.hourly_gross_min + self.hourly_gross_max) / 2 * (1 - self.commission)


KRAKOW_BENCHMARKS: Dict[Platform, PlatformBenchmark] = {
    Platform.UBER: PlatformBenchmark(55, 62, 0.3075, 1.75, 18),
    Platform.BOLT: PlatformBenchmark(40, 50, 0.25, 1.5, 20),
    Platform.FREENOW: PlatformBenchmark(42, 52, 0.20, 1.4, 22),
}

TIME_MULTIPLIERS: Dict[TimeRegime, Dict[ZoneCategory, float]] = {
    TimeRegime.MORNING_RUSH: {_AIRPORT: 1.6, _CENTER: 1.4, _RESIDENTIAL: 1.3},
    TimeRegime.MIDDAY: {_AIRPORT: 1.1, _CENTER: 1.0, _RESIDENTIAL: 0.9},
    TimeRegime.EVENING_RUSH: {_AIRPORT: 1.3, _CENTER: 1.5, _RESIDENTIAL: 1.2},
    TimeRegime.LATE_NIGHT: {_AIRPORT: 0.7, _CENTER: 1.6, _RESIDENTIAL: 0.6},
    TimeRegime.OVERNIGHT: {_AIRPORT: 0.5, _CENTER: 1.2, _RESIDENTIAL: 0.4},
}

WEEKEND_MULTIPLIERS: Dict[ZoneCategory, float] = {_AIRPORT: 0.9, _CENTER: 1.3, _RESIDENTIAL: 1.0}

PLATFORM_ZONE_AFFINITY: Dict[Platform, Dict[ZoneCategory, float]] = {
    Platform.UBER: {_AIRPORT: 1.2, _CENTER: 1.0, _RESIDENTIAL: 0.9},
    Platform.BOLT: {_AIRPORT: 0.9, _CENTER: 1.1, _RESIDENTIAL: 1.1},
    Platform.FREENOW: {_AIRPORT: 0.8, _CENTER: 1.2, _RESIDENTIAL: 1.0},
}

CONGESTION_BY_REGIME: Dict[TimeRegime, Dict[ZoneCategory, float]] = {
    TimeRegime.MORNING_RUSH: {_AIRPORT: 0.7, _CENTER: 0.8, _RESIDENTIAL: 0.5},
    TimeRegime.MIDDAY: {_AIRPORT: 0.4, _CENTER: 0.5, _RESIDENTIAL: 0.3},
    TimeRegime.EVENING_RUSH: {_AIRPORT: 0.6, _CENTER: 0.9, _RESIDENTIAL: 0.5},
    TimeRegime.LATE_NIGHT: {_AIRPORT: 0.2, _CENTER: 0.4, _RESIDENTIAL: 0.2},
    TimeRegime.OVERNIGHT: {_AIRPORT: 0.1, _CENTER: 0.2, _RESIDENTIAL: 0.1},
}


@dataclass(frozen=True)
class DemoEarningsRecord:
    platform: Platform
    zone_category: ZoneCategory
    day_mode: DayMode
    time_regime: TimeRegime
    avg_rev_per_hour: float
    avg_trip_amount: float
    avg_trip_duration: float
    trip_count: int
    congestion_factor: float


class DemoDataset:
    """
    Seedable demo benchmark dataset.

    >>> data = DemoDataset(seed=7)
    >>> record = data.record_for(Platform.UBER, ZoneCategory.AIRPORT, DayMode.WEEKDAY, TimeRegime.MIDDAY)
    """

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)
        self.records: List[DemoEarningsRecord] = self._generate()

    def _vary(self, base: float, variance: float = 0.15) -> float:
        mult = 1 + (self._rng.random() - 0.5) * 2 * variance
        return round(base * mult, 2)

    def _generate(self) -> List[DemoEarningsRecord]:
        records: List[DemoEarningsRecord] = []
        for platform in PLATFORMS:
            bench = KRAKOW_BENCHMARKS[platform]
            for category in ZoneCategory:
                for day_mode in DayMode:
                    for regime in TimeRegime:
                        time_mult = TIME_MULTIPLIERS[regime][category]
                        weekend_mult = WEEKEND_MULTIPLIERS[category] if day_mode == DayMode.WEEKEND else 1.0
                        affinity = PLATFORM_ZONE_AFFINITY[platform][category]

                        hourly = bench.net_hourly * time_mult * weekend_mult * affinity
                        trips_per_hour = bench.trips_per_hour * time_mult * weekend_mult
                        trip_amount = hourly / max(trips_per_hour, 0.5)

                        records.append(
                            DemoEarningsRecord(
                                platform=platform,
                                zone_category=category,
                                day_mode=day_mode,
                                time_regime=regime,
                                avg_rev_per_hour=self._vary(hourly, 0.1),
                                avg_trip_amount=self._vary(trip_amount, 0.15),
                                avg_trip_duration=self._vary(bench.avg_trip_duration, 0.2),
                                trip_count=self._rng.randint(10, 59),
                                congestion_factor=CONGESTION_BY_REGIME[regime][category],
                            )
                        )
        return records

    def regenerate(self, seed: Optional[int] = None) -> List[DemoEarningsRecord]:
        if seed is not None:
            self._rng.seed(seed)
        self.records = self._generate()
        return self.records

    def record_for(
        self,
        platform: str | Platform,
        zone_category: str | ZoneCategory,
        day_mode: str | DayMode,
        time_regime: str | TimeRegime,
    ) -> Optional[DemoEarningsRecord]:
        key = (Platform(platform), ZoneCategory(zone_category), DayMode(day_mode), TimeRegime(time_regime))
        for record in self.records:
            if (record.platform, record.zone_category, record.day_mode, record.time_regime) == key:
                return record
        return None

    def __len__(self) -> int:
        return len(self.records)


def opportunity_score(record: Optional[DemoEarningsRecord], congestion_weight: float = 0.3) -> float:
    if record is None:
        return 0.0
    rev_score = record.avg_rev_per_hour / 50
    penalty = record.congestion_factor * congestion_weight
    return max(0.0, min(1.0, rev_score - penalty))
