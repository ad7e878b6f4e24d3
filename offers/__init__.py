"""
Offers domain package.

Public API:
- Domain models: Offer, OfferInput, Session, ZoneDwell, BucketStats, ScoreComponents
- Recommendations: PickRecommendation | GuideRecommendation | CollectRecommendation
- Scoring: score_offer, get_idle_recommendation, format_recommendation_for_display
- Service: OfferAdvisor
"""
from .models import (
    Action,
    BucketStats,
    CollectRecommendation,
    Feedback,
    GuideRecommendation,
    MoneyProofCounters,
    Offer,
    OfferConfidence,
    OfferInput,
    OfferScore,
    PickRecommendation,
    Recommendation,
    RecommendationDisplay,
    ScoreComponents,
    Session,
    SessionStatus,
    ZoneDwell,
)
from .policy import DriverSettings, OfferPolicy, default_driver_settings, default_offer_policy
from .scorer import (
    format_recommendation_for_display,
    get_confidence_level,
    get_confidence_value,
    get_idle_recommendation,
    score_offer,
)
from .service import OfferAdvisor

__all__ = [
    "Action",
    "BucketStats",
    "CollectRecommendation",
    "Feedback",
    "GuideRecommendation",
    "MoneyProofCounters",
    "Offer",
    "OfferConfidence",
    "OfferInput",
    "OfferScore",
    "PickRecommendation",
    "Recommendation",
    "RecommendationDisplay",
    "ScoreComponents",
    "Session",
    "SessionStatus",
    "ZoneDwell",
    "DriverSettings",
    "OfferPolicy",
    "default_driver_settings",
    "default_offer_policy",
    "format_recommendation_for_display",
    "get_confidence_level",
    "get_confidence_value",
    "get_idle_recommendation",
    "score_offer",
    "OfferAdvisor",
]
