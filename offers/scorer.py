"""
Purpose: Live offer scorer (TAKE / DECLINE / WAIT / MOVE / COLLECT).
What it does:

score_offer():
1) distance     = given, else eta * speed_km_per_min
2) net_fare     = fare - cost_per_km * distance
3) hourly       = net_fare / eta * 60            (0 when eta <= 0)
4) confidence   = sample count of the destination bucket (WEAK / MEDIUM / STRONG)
5) WEAK         -> COLLECT (log N more trips)
6) otherwise    total = (1 - w) * hourly + w * historical_hourly_at_destination
                TAKE iff total >= target * (1 - tolerance)

get_idle_recommendation():
No offer in hand. Uses dwell time in the current zone and the total sample
count across platforms for that zone/bucket: COLLECT, MOVE or WAIT.

Bucket statistics come from any object exposing
get_stats_for_bucket(dest_zone, time_regime, day_type, platform) -> BucketStats | None
(DriverDatabase in production, a fake in tests).
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from scoring.context import Timestamp, resolve_context
from scoring.models import PLATFORMS
from zones.models import Zone
from zones.registry import get_zone_by_id, get_zone_name

from .models import (
    Action,
    CollectRecommendation,
    GuideRecommendation,
    OfferConfidence,
    OfferInput,
    OfferScore,
    PickRecommendation,
    Recommendation,
    RecommendationDisplay,
    ScoreComponents,
)
from .policy import DriverSettings, OfferPolicy, default_driver_settings, default_offer_policy


def get_confidence_level(sample_count: int, policy: Optional[OfferPolicy] = None) -> OfferConfidence:
    policy = policy or default_offer_policy()
    if sample_count < policy.min_samples:
        return OfferConfidence.WEAK
    if sample_count < policy.strong_samples:
        return OfferConfidence.MEDIUM
    return OfferConfidence.STRONG


def get_confidence_value(sample_count: int, policy: Optional[OfferPolicy] = None) -> float:
    """
    Piecewise-linear display value for the confidence bar:
    WEAK 0-0.35, MEDIUM 0.35-0.65, STRONG 0.65 rising to 0.85 over another 15 samples.
    """
    policy = policy or default_offer_policy()
    low, high = policy.min_samples, policy.strong_samples
    if sample_count < low:
        return 0.35 * (sample_count / low)
    if sample_count < high:
        return 0.35 + 0.30 * ((sample_count - low) / (high - low))
    return min(0.85, 0.65 + 0.20 * min((sample_count - high) / 15, 1))


def calculate_effective_hourly(
    fare: float,
    eta_minutes: float,
    distance_km: Optional[float],
    settings: DriverSettings,
    policy: OfferPolicy,
) -> tuple[float, float, float]:
    """
    Returns (effective_hourly, est_costs, net_fare).
    """
    distance = distance_km if distance_km is not None else eta_minutes * policy.speed_km_per_min
    est_costs = settings.cost_per_km_pln * distance
    net_fare = fare - est_costs
    effective_hourly = (net_fare / eta_minutes) * 60 if eta_minutes > 0 else 0.0
    return effective_hourly, est_costs, net_fare


def post_destination_weight(confidence: OfferConfidence, policy: OfferPolicy) -> float:
    if confidence == OfferConfidence.STRONG:
        return policy.strong_post_dest_weight
    if confidence == OfferConfidence.MEDIUM:
        return policy.medium_post_dest_weight
    return 0.0


def score_offer(
    offer: OfferInput,
    stats_source,
    settings: Optional[DriverSettings] = None,
    when: Optional[Timestamp] = None,
    policy: Optional[OfferPolicy] = None,
) -> OfferScore:
    settings = settings or default_driver_settings()
    policy = policy or default_offer_policy()
    context = resolve_context(when)

    stats = stats_source.get_stats_for_bucket(
        offer.dest_zone, context.time_regime, context.day_type, offer.platform
    )
    sample_count = stats.sample_count if stats else 0
    confidence = get_confidence_level(sample_count, policy)

    effective_hourly, est_costs, net_fare = calculate_effective_hourly(
        offer.fare, offer.eta_minutes, offer.distance_km, settings, policy
    )

    post_dest_hourly = stats.avg_rev_per_hour if stats else 0.0
    weight = post_destination_weight(confidence, policy)
    total_score = (1 - weight) * effective_hourly + weight * post_dest_hourly

    components = ScoreComponents(
        effective_hourly=effective_hourly,
        post_dest_hourly=post_dest_hourly,
        total_score=total_score,
        est_costs=est_costs,
        net_fare=net_fare,
    )

    if confidence == OfferConfidence.WEAK:
        needed = policy.min_samples - sample_count
        return OfferScore(
            recommendation=CollectRecommendation(
                needed_samples=needed,
                instruction=f"Log {needed} more trips to {get_zone_name(offer.dest_zone)} to get personalized recommendations",
            ),
            components=components,
        )

    threshold = settings.min_acceptable_hourly
    should_take = total_score >= threshold

    reasons: List[str] = []
    if should_take:
        reasons.append(f"Expected {round(total_score)} PLN/h meets your {round(threshold)} PLN/h target")
        if weight > 0 and post_dest_hourly > 0:
            reasons.append(f"{get_zone_name(offer.dest_zone)} historically yields {round(post_dest_hourly)} PLN/h")
    else:
        reasons.append(f"Expected {round(total_score)} PLN/h is below your {round(threshold)} PLN/h target")
        if est_costs > offer.fare * policy.high_cost_share:
            reasons.append(f"High estimated costs: {round(est_costs)} PLN")

    dest = get_zone_by_id(offer.dest_zone)
    return OfferScore(
        recommendation=PickRecommendation(
            action=Action.TAKE if should_take else Action.DECLINE,
            confidence=confidence,
            reasons=reasons,
            platform_hint=offer.platform,
            stay_until_min=dest.default_stay_until_min if dest else None,
            leave_if_min=dest.default_leave_if_min if dest else None,
            suggested_zone=dest.suggested_next_zones[0] if dest else None,
        ),
        components=components,
    )


def get_idle_recommendation(
    zone_id: Optional[str],
    dwell_minutes: float,
    stats_source,
    when: Optional[Timestamp] = None,
    policy: Optional[OfferPolicy] = None,
    zones: Optional[Sequence[Zone]] = None,
) -> Recommendation:
    policy = policy or default_offer_policy()

    if not zone_id:
        return CollectRecommendation(
            needed_samples=policy.min_samples,
            instruction="Enable location to get zone-based recommendations",
        )

    zone = get_zone_by_id(zone_id, zones)
    if zone is None:
        return CollectRecommendation(
            needed_samples=policy.min_samples,
            instruction="Zone not recognized. Log trips to build data.",
        )

    context = resolve_context(when)
    total_samples = 0
    for platform in PLATFORMS:
        stats = stats_source.get_stats_for_bucket(zone_id, context.time_regime, context.day_type, platform)
        total_samples += stats.sample_count if stats else 0

    confidence = get_confidence_level(total_samples, policy)
    if confidence == OfferConfidence.WEAK:
        needed = policy.min_samples - total_samples
        return CollectRecommendation(
            needed_samples=needed,
            instruction=f"Log {needed} trips from {zone.name} to build recommendations",
        )

    next_zone = zone.suggested_next_zones[0]

    if dwell_minutes >= zone.default_leave_if_min:
        return GuideRecommendation(
            action=Action.MOVE,
            confidence=confidence,
            reasons=[
                f"You've been in {zone.name} for {round(dwell_minutes)} min "
                f"(leave threshold: {zone.default_leave_if_min} min)",
                f"Consider moving to {get_zone_name(next_zone)}",
            ],
            stay_until_min=zone.default_stay_until_min,
            leave_if_min=zone.default_leave_if_min,
            suggested_zone=next_zone,
        )

    if dwell_minutes < zone.default_stay_until_min:
        reasons = [
            f"Wait up to {zone.default_stay_until_min} min in {zone.name}",
            f"Zone bias: {zone.primary_bias.value}",
        ]
    else:
        reasons = [
            f"In {zone.name} for {round(dwell_minutes)} min",
            f"Consider leaving after {zone.default_leave_if_min} min if no offers",
        ]

    return GuideRecommendation(
        action=Action.WAIT,
        confidence=confidence,
        reasons=reasons,
        stay_until_min=zone.default_stay_until_min,
        leave_if_min=zone.default_leave_if_min,
        suggested_zone=next_zone,
    )


def _confidence_label(confidence: OfferConfidence) -> str:
    return "High Confidence" if confidence == OfferConfidence.STRONG else "Moderate Confidence"


def format_recommendation_for_display(rec: Recommendation) -> RecommendationDisplay:
    if isinstance(rec, CollectRecommendation):
        return RecommendationDisplay(
            primary_action="COLLECT DATA",
            secondary_text=rec.instruction,
            confidence_label="Insufficient Data",
        )
    if isinstance(rec, (PickRecommendation, GuideRecommendation)):
        return RecommendationDisplay(
            primary_action=rec.action.value,
            secondary_text=rec.reasons[0] if rec.reasons else "",
            confidence_label=_confidence_label(rec.confidence),
        )
    raise TypeError(f"Unknown recommendation type: {type(rec).__name__}")
