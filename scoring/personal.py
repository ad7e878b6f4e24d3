"""
Purpose: Personal stats aggregator (the driver's own history, bucketed).
What it does:

For every platform, keeps only logs for the target zone whose OWN timestamp
resolves to the target (day-mode, time-regime), then computes time-decayed
averages:

weight            = exp(-days_since_log / decay_days)
avg_per_trip      = sum(w * amount) / sum(w)
has_duration_data = trips with duration > 0 are more than half of the matches
rev_per_hour      = avg_per_trip / weighted_avg_duration * 60   (only if trusted)

When duration is not trusted the per-hour figure is withheld (None) and
callers compare per-trip earnings instead.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .context import now_ms as current_ms
from .context import resolve_context
from .models import DayMode, EarningsLog, PLATFORMS, Platform, TimeRegime
from .policy import PersonalPolicy, TimeRegimePolicy, default_personal_policy, default_regime_policy

MS_PER_DAY = 24 * 60 * 60 * 1000


@dataclass(frozen=True)
class PersonalStats:
    platform: Platform
    zone: str
    day_mode: DayMode
    time_regime: TimeRegime
    avg_rev_per_hour: Optional[float]
    avg_earnings_per_trip: float
    trip_count: int
    total_earnings: float
    total_duration_minutes: float
    has_duration_data: bool


def time_decay_weight(timestamp_ms: int, now_ms: int, decay_days: float = 30.0) -> float:
    days = (now_ms - timestamp_ms) / MS_PER_DAY
    return math.exp(-days / decay_days)


def matching_logs(
    logs: Sequence[EarningsLog],
    platform: Platform,
    zone_id: str,
    day_mode: DayMode,
    time_regime: TimeRegime,
    regime_policy: Optional[TimeRegimePolicy] = None,
) -> List[EarningsLog]:
    """
    Logs for this platform + zone that happened in a comparable time bucket.
    """
    regime_policy = regime_policy or default_regime_policy()
    matches = []
    for log in logs:
        if log.platform != platform or log.zone != zone_id:
            continue
        context = resolve_context(log.timestamp, regime_policy)
        if context.day_mode == day_mode and context.time_regime == time_regime:
            matches.append(log)
    return matches


def calculate_personal_stats(
    logs: Sequence[EarningsLog],
    zone_id: str,
    day_mode: DayMode,
    time_regime: TimeRegime,
    now_ms: Optional[int] = None,
    policy: Optional[PersonalPolicy] = None,
) -> List[PersonalStats]:
    """
    One PersonalStats per platform, in platform order. Platforms without
    matching trips get a zeroed stat with avg_rev_per_hour=None.
    """
    policy = policy or default_personal_policy()
    regime_policy = default_regime_policy()
    now_ms = current_ms() if now_ms is None else now_ms
    day_mode = DayMode(day_mode)
    time_regime = TimeRegime(time_regime)

    stats: List[PersonalStats] = []
    for platform in PLATFORMS:
        relevant = matching_logs(logs, platform, zone_id, day_mode, time_regime, regime_policy)

        if not relevant:
            stats.append(
                PersonalStats(
                    platform=platform,
                    zone=zone_id,
                    day_mode=day_mode,
                    time_regime=time_regime,
                    avg_rev_per_hour=None,
                    avg_earnings_per_trip=0.0,
                    trip_count=0,
                    total_earnings=0.0,
                    total_duration_minutes=0.0,
                    has_duration_data=False,
                )
            )
            continue

        weighted_earnings = 0.0
        total_weight = 0.0
        weighted_duration = 0.0
        duration_weight = 0.0
        trips_with_duration = 0

        for log in relevant:
            weight = time_decay_weight(log.timestamp, now_ms, policy.decay_days)
            weighted_earnings += log.amount * weight
            total_weight += weight

            if log.duration and log.duration > 0:
                weighted_duration += log.duration * weight
                duration_weight += weight
                trips_with_duration += 1

        avg_per_trip = weighted_earnings / total_weight if total_weight > 0 else 0.0
        has_duration_data = trips_with_duration > len(relevant) * policy.duration_share_required

        avg_rev_per_hour: Optional[float] = None
        if has_duration_data and weighted_duration > 0:
            avg_duration = weighted_duration / duration_weight
            avg_rev_per_hour = avg_per_trip / avg_duration * 60

        stats.append(
            PersonalStats(
                platform=platform,
                zone=zone_id,
                day_mode=day_mode,
                time_regime=time_regime,
                avg_rev_per_hour=avg_rev_per_hour,
                avg_earnings_per_trip=avg_per_trip,
                trip_count=len(relevant),
                total_earnings=sum(log.amount for log in relevant),
                total_duration_minutes=sum(log.duration or 0 for log in relevant),
                has_duration_data=has_duration_data,
            )
        )

    return stats
