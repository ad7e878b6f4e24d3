from datetime import datetime

import pytest

from scoring.models import ConfidenceLevel, Platform
from scoring.ranking import (
    calculate_rankings,
    confidence_from_gap,
    get_demand_level,
    get_friction_level,
    softmax,
)
from scoring.policy import RankingPolicy, default_ranking_policy
from zones.models import ZoneCategory

WEEKDAY_EVENING = datetime(2024, 3, 13, 17, 30)


def test_softmax_is_a_distribution():
    probabilities = softmax([1.0, 2.0, 3.0])
    assert sum(probabilities) == pytest.approx(1.0)
    assert probabilities == sorted(probabilities)
    assert softmax([]) == []


def test_softmax_temperature_sharpens():
    sharp = softmax([1.0, 2.0], temperature=0.5)
    flat = softmax([1.0, 2.0], temperature=2.0)
    assert sharp[1] > flat[1]
    # large scores must not overflow
    assert sum(softmax([1000.0, 1001.0])) == pytest.approx(1.0)


@pytest.mark.parametrize("category", list(ZoneCategory))
def test_rankings_are_sorted_probabilities(category):
    result = calculate_rankings(category, WEEKDAY_EVENING)

    assert len(result.rankings) == 3
    assert {p.platform for p in result.rankings} == set(Platform)
    assert sum(p.probability for p in result.rankings) == pytest.approx(1.0)
    assert all(0 <= p.probability <= 1 for p in result.rankings)

    probabilities = [p.probability for p in result.rankings]
    assert probabilities == sorted(probabilities, reverse=True)
    assert result.top_platform == result.rankings[0].platform
    assert result.rankings[0].score == max(p.score for p in result.rankings)

    assert result.confidence_value == pytest.approx(probabilities[0] - probabilities[1])
    assert result.confidence == confidence_from_gap(result.confidence_value)


def test_top_platform_follows_priors():
    # demand and friction are shared; incentives and reliability decide
    assert calculate_rankings("center", WEEKDAY_EVENING).top_platform == Platform.BOLT
    assert calculate_rankings("airport", WEEKDAY_EVENING).top_platform == Platform.UBER


def test_components_follow_the_formula():
    policy = default_ranking_policy()
    result = calculate_rankings(ZoneCategory.CENTER, WEEKDAY_EVENING)
    top = result.rankings[0]

    seasonality = policy.seasonality[ZoneCategory.CENTER][result.context.day_mode][result.context.time_regime]
    expected_demand = policy.a1 + policy.a2 + policy.a3 * seasonality
    expected_friction = policy.b1 * policy.congestion[ZoneCategory.CENTER][17] + policy.b2 * 0.2

    assert top.demand_score == pytest.approx(expected_demand)
    assert top.friction_score == pytest.approx(expected_friction)
    assert top.score == pytest.approx(
        policy.w1 * top.demand_score
        - policy.w2 * top.friction_score
        + policy.w3 * top.incentive_score
        + policy.w4 * top.reliability_score
    )


def test_non_positive_temperature_uses_default():
    default = calculate_rankings("residential", WEEKDAY_EVENING)
    zero = calculate_rankings("residential", WEEKDAY_EVENING, temperature=0)
    negative = calculate_rankings("residential", WEEKDAY_EVENING, temperature=-2)

    expected = [p.probability for p in default.rankings]
    assert [p.probability for p in zero.rankings] == pytest.approx(expected)
    assert [p.probability for p in negative.rankings] == pytest.approx(expected)


def test_lower_temperature_widens_the_gap():
    sharp = calculate_rankings("center", WEEKDAY_EVENING, temperature=0.05)
    flat = calculate_rankings("center", WEEKDAY_EVENING, temperature=1.0)
    assert sharp.confidence_value > flat.confidence_value


def test_unknown_category_is_rejected():
    with pytest.raises(ValueError):
        calculate_rankings("beach", WEEKDAY_EVENING)


def test_confidence_thresholds():
    assert confidence_from_gap(0.30) == ConfidenceLevel.STRONG
    assert confidence_from_gap(0.29) == ConfidenceLevel.MEDIUM
    assert confidence_from_gap(0.15) == ConfidenceLevel.MEDIUM
    assert confidence_from_gap(0.149) == ConfidenceLevel.WEAK


def test_display_levels():
    assert get_demand_level(1.2) == "High"
    assert get_demand_level(0.8) == "Medium"
    assert get_demand_level(0.79) == "Low"
    assert get_friction_level(0.6) == "High"
    assert get_friction_level(0.3) == "Medium"
    assert get_friction_level(0.1) == "Low"


def test_ranking_policy_validation():
    with pytest.raises(ValueError):
        RankingPolicy(default_temperature=0).validate()
    with pytest.raises(ValueError):
        RankingPolicy(strong_gap=0.1, medium_gap=0.2).validate()
    with pytest.raises(ValueError):
        RankingPolicy(congestion={category: [0.1] * 12 for category in ZoneCategory}).validate()
