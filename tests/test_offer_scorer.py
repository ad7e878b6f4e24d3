from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from offers.models import (
    Action,
    BucketStats,
    CollectRecommendation,
    GuideRecommendation,
    MoneyProofCounters,
    OfferConfidence,
    OfferInput,
    PickRecommendation,
)
from offers.policy import DriverSettings, OfferPolicy, default_offer_policy
from offers.scorer import (
    calculate_effective_hourly,
    format_recommendation_for_display,
    get_confidence_level,
    get_confidence_value,
    get_idle_recommendation,
    score_offer,
)
from offers.service import OfferAdvisor
from scoring.models import Platform, TimeRegime

WEDNESDAY_NOON = datetime(2024, 3, 13, 12, 0)


class FakeStats:
    """
    Stats source answering every bucket with the same sample count / hourly rate.
    """

    def __init__(self, sample_count=0, avg_rev_per_hour=0.0):
        self.sample_count = sample_count
        self.avg_rev_per_hour = avg_rev_per_hour
        self.calls = []

    def get_stats_for_bucket(self, dest_zone, time_regime, day_type, platform):
        self.calls.append((dest_zone, time_regime, day_type, platform))
        if not self.sample_count:
            return None
        return BucketStats(
            platform=platform,
            dest_zone=dest_zone,
            time_regime=time_regime,
            day_type=day_type,
            sample_count=self.sample_count,
            recent_sample_count=self.sample_count,
            avg_rev_per_hour=self.avg_rev_per_hour,
            acceptance_ratio=0.5,
        )


class BrokenDatabase:
    def _fail(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("disk I/O error"))

    get_stats_for_bucket = _fail
    save_offer = _fail
    record_feedback = _fail
    get_recent_offers = _fail
    get_money_proof_counters = _fail


@pytest.fixture
def offer():
    return OfferInput.new("uber", "stare-miasto", "kazimierz", fare=50, eta_minutes=30, distance_km=10)


def test_effective_hourly_worked_example():
    hourly, costs, net = calculate_effective_hourly(50, 30, 10, DriverSettings(), default_offer_policy())
    assert costs == pytest.approx(7.0)
    assert net == pytest.approx(43.0)
    assert hourly == pytest.approx(86.0)
    assert DriverSettings().min_acceptable_hourly == pytest.approx(81.0)


def test_effective_hourly_estimates_distance_and_guards_eta():
    hourly, costs, _ = calculate_effective_hourly(40, 20, None, DriverSettings(), default_offer_policy())
    # 20 min * 0.45 km/min = 9 km
    assert costs == pytest.approx(6.3)
    assert hourly == pytest.approx((40 - 6.3) / 20 * 60)

    hourly, _, _ = calculate_effective_hourly(40, 0, 5, DriverSettings(), default_offer_policy())
    assert hourly == 0.0


def test_take_with_medium_history(offer):
    stats = FakeStats(sample_count=10, avg_rev_per_hour=100.0)
    result = score_offer(offer, stats, when=WEDNESDAY_NOON)
    rec = result.recommendation

    assert isinstance(rec, PickRecommendation)
    assert rec.action == Action.TAKE
    assert rec.confidence == OfferConfidence.MEDIUM
    assert rec.platform_hint == Platform.UBER
    assert rec.suggested_zone == "stare-miasto"
    assert rec.stay_until_min == 10
    assert rec.leave_if_min == 18

    # 0.8 * 86 + 0.2 * 100
    assert result.components.total_score == pytest.approx(88.8)
    assert result.components.post_dest_hourly == pytest.approx(100.0)
    assert stats.calls == [("kazimierz", TimeRegime.MIDDAY, "weekday", Platform.UBER)]
    assert any("Kazimierz" in reason for reason in rec.reasons)


def test_strong_history_weighs_destination_more(offer):
    result = score_offer(offer, FakeStats(sample_count=15, avg_rev_per_hour=50.0), when=WEDNESDAY_NOON)
    rec = result.recommendation

    # 0.7 * 86 + 0.3 * 50 = 75.2 < 81
    assert result.components.total_score == pytest.approx(75.2)
    assert rec.action == Action.DECLINE
    assert rec.confidence == OfferConfidence.STRONG


def test_decline_mentions_high_costs():
    cheap = OfferInput.new("bolt", "stare-miasto", "kazimierz", fare=20, eta_minutes=30, distance_km=10)
    rec = score_offer(cheap, FakeStats(sample_count=8, avg_rev_per_hour=100.0), when=WEDNESDAY_NOON).recommendation

    assert rec.action == Action.DECLINE
    assert rec.reasons[0].startswith("Expected 41 PLN/h is below")
    assert "High estimated costs: 7 PLN" in rec.reasons


def test_thin_history_asks_for_more_trips(offer):
    result = score_offer(offer, FakeStats(sample_count=2, avg_rev_per_hour=100.0), when=WEDNESDAY_NOON)
    rec = result.recommendation

    assert isinstance(rec, CollectRecommendation)
    assert rec.action == Action.COLLECT
    assert rec.confidence == OfferConfidence.WEAK
    assert rec.needed_samples == 3
    assert rec.instruction.startswith("Log 3 more trips to Kazimierz")
    # components are still reported for the offer card
    assert result.components.effective_hourly == pytest.approx(86.0)


FLAT_POLICY = OfferPolicy(medium_post_dest_weight=0.0, strong_post_dest_weight=0.0)


@pytest.mark.parametrize("fare, action", [(81.0, Action.TAKE), (80.99, Action.DECLINE)])
def test_take_threshold_is_inclusive(fare, action):
    """
    With the destination blend switched off the total equals the offer's own hourly rate,
    so an hour-long trip with no costs pays exactly its fare per hour against the 81 PLN/h bar.
    """
    offer = OfferInput.new("uber", "stare-miasto", "kazimierz", fare=fare, eta_minutes=60, distance_km=0)
    stats = FakeStats(sample_count=10, avg_rev_per_hour=200.0)
    result = score_offer(offer, stats, when=WEDNESDAY_NOON, policy=FLAT_POLICY)

    assert result.components.total_score == pytest.approx(fare)
    assert result.recommendation.action == action


@pytest.mark.parametrize("eta_minutes", [0, -5])
def test_non_positive_eta_scores_zero_hourly(eta_minutes):
    offer = OfferInput.new("bolt", "stare-miasto", "kazimierz", fare=60, eta_minutes=eta_minutes, distance_km=3)
    result = score_offer(offer, FakeStats(sample_count=10, avg_rev_per_hour=100.0), when=WEDNESDAY_NOON)

    assert result.components.effective_hourly == 0.0
    # only the destination history counts: 0.2 * 100
    assert result.components.total_score == pytest.approx(20.0)
    assert result.recommendation.action == Action.DECLINE


def test_more_samples_never_lower_confidence(offer):
    order = [OfferConfidence.WEAK, OfferConfidence.MEDIUM, OfferConfidence.STRONG]
    previous_rank, previous_value = 0, 0.0

    for count in range(0, 41):
        stats = FakeStats(sample_count=count, avg_rev_per_hour=90.0)
        rec = score_offer(offer, stats, when=WEDNESDAY_NOON).recommendation
        rank = order.index(rec.confidence)
        value = get_confidence_value(count)

        assert rank >= previous_rank
        assert value >= previous_value
        previous_rank, previous_value = rank, value


def test_no_history_needs_full_sample(offer):
    rec = score_offer(offer, FakeStats(), when=WEDNESDAY_NOON).recommendation
    assert rec.needed_samples == 5


def test_confidence_levels_and_values():
    assert get_confidence_level(4) == OfferConfidence.WEAK
    assert get_confidence_level(5) == OfferConfidence.MEDIUM
    assert get_confidence_level(14) == OfferConfidence.MEDIUM
    assert get_confidence_level(15) == OfferConfidence.STRONG

    assert get_confidence_value(0) == pytest.approx(0.0)
    assert get_confidence_value(5) == pytest.approx(0.35)
    assert get_confidence_value(10) == pytest.approx(0.50)
    assert get_confidence_value(15) == pytest.approx(0.65)
    assert get_confidence_value(30) == pytest.approx(0.85)
    assert get_confidence_value(300) == pytest.approx(0.85)


def test_idle_without_location_or_known_zone():
    rec = get_idle_recommendation(None, 0, FakeStats(sample_count=10), WEDNESDAY_NOON)
    assert isinstance(rec, CollectRecommendation)
    assert "Enable location" in rec.instruction

    rec = get_idle_recommendation("atlantis", 0, FakeStats(sample_count=10), WEDNESDAY_NOON)
    assert isinstance(rec, CollectRecommendation)
    assert "not recognized" in rec.instruction


def test_idle_collects_when_zone_history_is_thin():
    # one sample per platform
    stats = FakeStats(sample_count=1)
    rec = get_idle_recommendation("stare-miasto", 3, stats, WEDNESDAY_NOON)

    assert isinstance(rec, CollectRecommendation)
    assert rec.needed_samples == 2
    assert len(stats.calls) == 3


@pytest.mark.parametrize(
    "dwell_minutes, action, first_reason",
    [
        (3, Action.WAIT, "Wait up to 8 min in Stare Miasto"),
        (12, Action.WAIT, "In Stare Miasto for 12 min"),
        (15, Action.MOVE, "You've been in Stare Miasto for 15 min (leave threshold: 15 min)"),
    ],
)
def test_idle_guidance_by_dwell(dwell_minutes, action, first_reason):
    rec = get_idle_recommendation("stare-miasto", dwell_minutes, FakeStats(sample_count=2), WEDNESDAY_NOON)

    assert isinstance(rec, GuideRecommendation)
    assert rec.action == action
    assert rec.confidence == OfferConfidence.MEDIUM
    assert rec.reasons[0] == first_reason
    assert rec.suggested_zone == "kazimierz"
    assert rec.stay_until_min == 8
    assert rec.leave_if_min == 15


def test_format_recommendation_for_display():
    collect = CollectRecommendation(needed_samples=3, instruction="Log 3 more trips")
    display = format_recommendation_for_display(collect)
    assert display.primary_action == "COLLECT DATA"
    assert display.secondary_text == "Log 3 more trips"
    assert display.confidence_label == "Insufficient Data"

    take = PickRecommendation(action=Action.TAKE, confidence=OfferConfidence.STRONG, reasons=["Good"])
    display = format_recommendation_for_display(take)
    assert display.primary_action == "TAKE"
    assert display.secondary_text == "Good"
    assert display.confidence_label == "High Confidence"

    wait = GuideRecommendation(
        action=Action.WAIT, confidence=OfferConfidence.MEDIUM, reasons=[], stay_until_min=5, leave_if_min=10
    )
    display = format_recommendation_for_display(wait)
    assert display.secondary_text == ""
    assert display.confidence_label == "Moderate Confidence"

    with pytest.raises(TypeError):
        format_recommendation_for_display(object())


def test_policy_validation():
    with pytest.raises(ValueError):
        OfferPolicy(min_samples=15, strong_samples=5).validate()
    with pytest.raises(ValueError):
        DriverSettings(tolerance_percent=1.5).validate()


def test_advisor_degrades_when_store_fails(offer):
    advisor = OfferAdvisor(BrokenDatabase())

    score = advisor.evaluate(offer, WEDNESDAY_NOON)
    assert isinstance(score.recommendation, CollectRecommendation)

    saved = advisor.evaluate_and_save(offer, when=WEDNESDAY_NOON)
    assert saved.offer is None
    assert saved.warnings == ["Offer was not saved"]

    assert isinstance(advisor.idle("stare-miasto", 5, WEDNESDAY_NOON), CollectRecommendation)
    assert advisor.record_feedback(1, "FOLLOWED") is False
    assert advisor.recent_offers() == []
    assert advisor.money_proof() == MoneyProofCounters(0.0, 0.0, 0, 0)
