"""
Purpose: Offer advisor service (what the app screens call).
What it does:
- Scores an incoming offer against the driver's bucket history and stores it
- Gives idle (no offer in hand) guidance for the current zone
- Records post-hoc feedback and reads the money-proof counters

Rule: Store failures never reach the caller. They are logged and turned into
a degraded answer (COLLECT, empty list, zeroed counters).
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from scoring.context import Timestamp

from .models import (
    CollectRecommendation,
    Feedback,
    MoneyProofCounters,
    Offer,
    OfferInput,
    OfferScore,
    Recommendation,
    SavedOffer,
)
from .policy import DriverSettings, OfferPolicy, default_driver_settings, default_offer_policy
from .scorer import get_idle_recommendation, score_offer

logger = logging.getLogger(__name__)


class NoHistory:
    """Stats source used when the store cannot be read."""

    def get_stats_for_bucket(self, dest_zone, time_regime, day_type, platform):
        return None


class OfferAdvisor:
    def __init__(
        self,
        database,
        settings: Optional[DriverSettings] = None,
        policy: Optional[OfferPolicy] = None,
    ):
        self.database = database
        self.settings = settings or default_driver_settings()
        self.policy = policy or default_offer_policy()

    def evaluate(self, offer: OfferInput, when: Optional[Timestamp] = None) -> OfferScore:
        try:
            return score_offer(offer, self.database, self.settings, when, self.policy)
        except SQLAlchemyError as e:
            logger.error(f"Could not read bucket stats for {offer.dest_zone}: {e}")
            return score_offer(offer, NoHistory(), self.settings, when, self.policy)

    def evaluate_and_save(
        self,
        offer: OfferInput,
        session_id: Optional[int] = None,
        when: Optional[Timestamp] = None,
    ) -> SavedOffer:
        score = self.evaluate(offer, when)
        rec = score.recommendation
        try:
            saved = self.database.save_offer(
                offer,
                session_id=session_id,
                recommendation_action=rec.action.value,
                recommendation_confidence=rec.confidence.value,
                score_components=score.components.to_dict(),
            )
        except SQLAlchemyError as e:
            logger.error(f"Could not save offer: {e}")
            return SavedOffer(offer=None, score=score, warnings=["Offer was not saved"])
        return SavedOffer(offer=saved, score=score)

    def idle(
        self,
        zone_id: Optional[str],
        dwell_minutes: float,
        when: Optional[Timestamp] = None,
    ) -> Recommendation:
        try:
            return get_idle_recommendation(zone_id, dwell_minutes, self.database, when, self.policy)
        except SQLAlchemyError as e:
            logger.error(f"Could not build idle recommendation for {zone_id}: {e}")
            return CollectRecommendation(
                needed_samples=self.policy.min_samples,
                instruction="Trip history is unavailable right now",
            )

    def record_feedback(
        self,
        offer_id: int,
        feedback: str | Feedback,
        actual_fare: Optional[float] = None,
        actual_duration_min: Optional[float] = None,
    ) -> bool:
        try:
            self.database.record_feedback(offer_id, feedback, actual_fare, actual_duration_min)
            return True
        except SQLAlchemyError as e:
            logger.error(f"Could not record feedback for offer {offer_id}: {e}")
            return False

    def recent_offers(self, limit: int = 50) -> List[Offer]:
        try:
            return self.database.get_recent_offers(limit)
        except SQLAlchemyError as e:
            logger.error(f"Could not load recent offers: {e}")
            return []

    def money_proof(self) -> MoneyProofCounters:
        try:
            return self.database.get_money_proof_counters()
        except SQLAlchemyError as e:
            logger.error(f"Could not compute money-proof counters: {e}")
            return MoneyProofCounters(0.0, 0.0, 0, 0)
