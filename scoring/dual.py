"""
Purpose: Dual-mode scorer (PILOT = market benchmarks, PERSONAL = own history).
What it does:
- PERSONAL requested and at least `min_records` comparable trips across all
  platforms: score each platform from personal stats, normalise by simple
  proportional share, report Strong/Medium/Weak at the personal thresholds.
- Otherwise: benchmark ranking, still reporting how many logs the driver has
  for the zone so the UI can show progress towards personal mode.

Both branches return DualRankingResult so callers never branch on mode to read it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from zones.models import ZoneCategory
from zones.registry import get_zone_by_id

from .context import Timestamp, resolve_context, to_datetime, to_epoch_ms
from .models import ConfidenceLevel, EarningsLog, PlatformScore, RankingResult
from .personal import calculate_personal_stats
from .policy import PersonalPolicy, default_personal_policy
from .ranking import calculate_rankings


class ScoringMode(str, Enum):
    PILOT = "PILOT"
    PERSONAL = "PERSONAL"


PILOT_MODE_LABEL = "Pilot mode using market benchmarks. Log earnings to unlock Personal mode."
PILOT_DATA_SOURCE = "Krakow market benchmarks"


@dataclass
class DualRankingResult(RankingResult):
    mode: ScoringMode
    mode_label: str
    data_source: str
    min_records_required: int
    current_record_count: int


def personal_confidence(value: float, policy: Optional[PersonalPolicy] = None) -> ConfidenceLevel:
    policy = policy or default_personal_policy()
    if value >= policy.strong_gap:
        return ConfidenceLevel.STRONG
    if value >= policy.medium_gap:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.WEAK


def score_pilot(
    zone_category: str | ZoneCategory,
    when: Optional[Timestamp] = None,
    temperature: Optional[float] = None,
    policy: Optional[PersonalPolicy] = None,
) -> DualRankingResult:
    policy = policy or default_personal_policy()
    base = calculate_rankings(zone_category, when, temperature)

    return DualRankingResult(
        rankings=base.rankings,
        top_platform=base.top_platform,
        confidence=base.confidence,
        confidence_value=base.confidence_value,
        context=base.context,
        mode=ScoringMode.PILOT,
        mode_label=PILOT_MODE_LABEL,
        data_source=PILOT_DATA_SOURCE,
        min_records_required=policy.min_records,
        current_record_count=0,
    )


def score_personal(
    logs: Sequence[EarningsLog],
    zone_id: str,
    when: Optional[Timestamp] = None,
    policy: Optional[PersonalPolicy] = None,
) -> Optional[DualRankingResult]:
    """
    Returns None when the zone is unknown or history is too thin to trust.
    """
    policy = policy or default_personal_policy()
    moment = to_datetime(when)
    context = resolve_context(moment)

    if get_zone_by_id(zone_id) is None:
        return None

    stats = calculate_personal_stats(
        logs,
        zone_id,
        context.day_mode,
        context.time_regime,
        now_ms=to_epoch_ms(moment),
        policy=policy,
    )
    total_records = sum(stat.trip_count for stat in stats)
    if total_records < policy.min_records:
        return None

    has_any_duration = any(stat.has_duration_data for stat in stats)

    platform_scores: List[PlatformScore] = []
    for stat in stats:
        if has_any_duration and stat.avg_rev_per_hour is not None:
            score = stat.avg_rev_per_hour / policy.rev_per_hour_norm
        else:
            score = stat.avg_earnings_per_trip / policy.earnings_per_trip_norm

        score += min(stat.trip_count / policy.boost_divisor, policy.boost_cap)

        # demand/friction/incentive/reliability are display-only in personal mode
        platform_scores.append(
            PlatformScore(
                platform=stat.platform,
                score=max(0.0, score),
                probability=0.0,
                demand_score=stat.avg_earnings_per_trip / policy.earnings_per_trip_norm,
                friction_score=0.3,
                incentive_score=0.1,
                reliability_score=stat.trip_count / 50,
            )
        )

    total_score = sum(p.score for p in platform_scores) or 1.0
    for platform_score in platform_scores:
        platform_score.probability = platform_score.score / total_score

    platform_scores.sort(key=lambda p: p.score, reverse=True)

    runner_up = platform_scores[1].probability if len(platform_scores) > 1 else 0.0
    confidence_value = platform_scores[0].probability - runner_up

    if has_any_duration:
        mode_label = "Based on your logged earnings"
        data_source = "Your earnings history (PLN/hour)"
    else:
        mode_label = "Based on your logged earnings (duration missing - showing per-trip)"
        data_source = "Your earnings history (per trip, duration missing)"

    return DualRankingResult(
        rankings=platform_scores,
        top_platform=platform_scores[0].platform,
        confidence=personal_confidence(confidence_value, policy),
        confidence_value=confidence_value,
        context=context,
        mode=ScoringMode.PERSONAL,
        mode_label=mode_label,
        data_source=data_source,
        min_records_required=policy.min_records,
        current_record_count=total_records,
    )


def record_count_for_zone(logs: Sequence[EarningsLog], zone_id: str) -> int:
    return sum(1 for log in logs if log.zone == zone_id)


def has_enough_data_for_personal(
    logs: Sequence[EarningsLog],
    zone_id: str,
    policy: Optional[PersonalPolicy] = None,
) -> bool:
    policy = policy or default_personal_policy()
    return record_count_for_zone(logs, zone_id) >= policy.min_records


def calculate_dual_ranking(
    mode: str | ScoringMode,
    logs: Sequence[EarningsLog],
    zone_id: str,
    zone_category: str | ZoneCategory,
    when: Optional[Timestamp] = None,
    temperature: Optional[float] = None,
    policy: Optional[PersonalPolicy] = None,
) -> DualRankingResult:
    """
    Single entry point for the "which platform" screen.
    PERSONAL silently falls back to PILOT when personal data is insufficient.
    """
    policy = policy or default_personal_policy()
    moment = to_datetime(when)

    if ScoringMode(mode) == ScoringMode.PERSONAL:
        personal = score_personal(logs, zone_id, moment, policy)
        if personal is not None:
            return personal

    pilot = score_pilot(zone_category, moment, temperature, policy)
    pilot.current_record_count = record_count_for_zone(logs, zone_id)
    return pilot
