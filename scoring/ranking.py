"""
Purpose: Benchmark ranking model (the "which platform" layer without personal data).
What it does:

For a zone category and a moment in time computes, per platform:

demand      = a1*event + a2*weather + a3*seasonality[category][day_mode][regime]
friction    = b1*congestion[category][hour] + b2*deadhead_risk[category]
incentive   = prior[platform][category]
reliability = prior[platform]
score       = w1*demand - w2*friction + w3*incentive + w4*reliability

Scores become probabilities through a temperature softmax. The probability gap
between the top two platforms is the confidence value, mapped to Strong /
Medium / Weak.

Rule: Pure function of (category, time, temperature, policy). Always answers.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import numpy as np

from zones.models import ZoneCategory

from .context import Timestamp, resolve_context, to_datetime
from .models import ConfidenceLevel, PLATFORMS, PlatformScore, RankingResult
from .policy import RankingPolicy, default_ranking_policy

logger = logging.getLogger(__name__)


def softmax(scores: Sequence[float], temperature: float = 1.0) -> List[float]:
    """
    Temperature softmax, stabilised by subtracting the max score.
    Lower temperature sharpens the distribution.
    """
    values = np.asarray(scores, dtype=float)
    if values.size == 0:
        return []
    exp_scores = np.exp((values - values.max()) / temperature)
    return (exp_scores / exp_scores.sum()).tolist()


def confidence_from_gap(value: float, policy: Optional[RankingPolicy] = None) -> ConfidenceLevel:
    policy = policy or default_ranking_policy()
    if value >= policy.strong_gap:
        return ConfidenceLevel.STRONG
    if value >= policy.medium_gap:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.WEAK


def calculate_demand(category: ZoneCategory, when: Timestamp, policy: RankingPolicy) -> float:
    context = resolve_context(when)
    seasonality = policy.seasonality[category][context.day_mode][context.time_regime]
    return (
        policy.a1 * policy.event_multiplier
        + policy.a2 * policy.weather_multiplier
        + policy.a3 * seasonality
    )


def calculate_friction(category: ZoneCategory, when: Timestamp, policy: RankingPolicy) -> float:
    hour = to_datetime(when).hour
    congestion = policy.congestion[category][hour]
    return policy.b1 * congestion + policy.b2 * policy.deadhead_risk[category]


def calculate_rankings(
    zone_category: str | ZoneCategory,
    when: Optional[Timestamp] = None,
    temperature: Optional[float] = None,
    policy: Optional[RankingPolicy] = None,
) -> RankingResult:
    """
    Rank every platform for the given zone category at `when` (default: now).
    """
    policy = policy or default_ranking_policy()
    category = ZoneCategory(zone_category)
    moment = to_datetime(when)

    if temperature is None:
        temperature = policy.default_temperature
    elif temperature <= 0:
        logger.warning("Ignoring non-positive softmax temperature %s", temperature)
        temperature = policy.default_temperature

    demand = calculate_demand(category, moment, policy)
    friction = calculate_friction(category, moment, policy)

    platform_scores: List[PlatformScore] = []
    for platform in PLATFORMS:
        incentive = policy.incentive_priors[platform][category]
        reliability = policy.reliability_priors[platform]
        score = (
            policy.w1 * demand
            - policy.w2 * friction
            + policy.w3 * incentive
            + policy.w4 * reliability
        )
        platform_scores.append(
            PlatformScore(
                platform=platform,
                score=score,
                probability=0.0,
                demand_score=demand,
                friction_score=friction,
                incentive_score=incentive,
                reliability_score=reliability,
            )
        )

    probabilities = softmax([p.score for p in platform_scores], temperature)
    for platform_score, probability in zip(platform_scores, probabilities):
        platform_score.probability = probability

    # stable sort keeps catalog order between equal probabilities
    platform_scores.sort(key=lambda p: p.probability, reverse=True)

    confidence_value = platform_scores[0].probability - platform_scores[1].probability

    return RankingResult(
        rankings=platform_scores,
        top_platform=platform_scores[0].platform,
        confidence=confidence_from_gap(confidence_value, policy),
        confidence_value=confidence_value,
        context=resolve_context(moment),
    )


def get_demand_level(value: float, policy: Optional[RankingPolicy] = None) -> str:
    policy = policy or default_ranking_policy()
    if value >= policy.demand_high:
        return "High"
    if value >= policy.demand_medium:
        return "Medium"
    return "Low"


def get_friction_level(value: float, policy: Optional[RankingPolicy] = None) -> str:
    policy = policy or default_ranking_policy()
    if value >= policy.friction_high:
        return "High"
    if value >= policy.friction_medium:
        return "Medium"
    return "Low"
