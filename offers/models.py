"""
Purpose: Domain models for the Offers capability.
What it does:
- Defines persisted records:
  Session (start/end, active|completed)
  ZoneDwell (contiguous stay in one zone inside a session)
  Offer (an incoming ride offer + the advice we gave + driver feedback)
- Defines derived aggregates: BucketStats, MoneyProofCounters
- Defines scorer input/output:
  OfferInput, ScoreComponents and the Recommendation tagged union
  (PickRecommendation | GuideRecommendation | CollectRecommendation)

Rule: No SQL, no scoring math. Models only.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import List, Literal, Optional, Union

from scoring.models import Platform, TimeRegime


class SessionStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class Feedback(str, Enum):
    FOLLOWED = "FOLLOWED"
    IGNORED = "IGNORED"


class OfferConfidence(str, Enum):
    WEAK = "WEAK"
    MEDIUM = "MEDIUM"
    STRONG = "STRONG"


class Action(str, Enum):
    TAKE = "TAKE"
    DECLINE = "DECLINE"
    WAIT = "WAIT"
    MOVE = "MOVE"
    COLLECT = "COLLECT"


@dataclass(frozen=True)
class Session:
    id: int
    start_ms: int
    end_ms: Optional[int] = None
    status: SessionStatus = SessionStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE


@dataclass(frozen=True)
class ZoneDwell:
    id: int
    session_id: int
    zone_id: str
    start_ms: int
    time_regime: TimeRegime
    day_type: str  # "weekday" | "weekend"
    end_ms: Optional[int] = None
    distance_est_km: float = 0.0

    @property
    def is_open(self) -> bool:
        return self.end_ms is None


@dataclass(frozen=True)
class Offer:
    """
    Append-only except for feedback/actual_* which stay None until the driver reports back.
    """
    id: int
    platform: Platform
    pickup_zone: str
    dest_zone: str
    fare: float
    eta_minutes: float
    created_at_ms: int
    time_regime: TimeRegime
    day_type: str
    session_id: Optional[int] = None
    distance_km: Optional[float] = None
    surge_flag: bool = False
    note: Optional[str] = None
    recommendation_action: Optional[str] = None
    recommendation_confidence: Optional[str] = None
    model_version: str = "v1"
    score_components: Optional[str] = None  # json text
    feedback: Optional[Feedback] = None
    actual_fare: Optional[float] = None
    actual_duration_min: Optional[float] = None


@dataclass(frozen=True)
class OfferInput:
    platform: Platform
    pickup_zone: str
    dest_zone: str
    fare: float
    eta_minutes: float
    distance_km: Optional[float] = None
    surge_flag: bool = False
    note: Optional[str] = None

    @classmethod
    def new(
        cls,
        platform: str | Platform,
        pickup_zone: str,
        dest_zone: str,
        fare: float,
        eta_minutes: float,
        distance_km: Optional[float] = None,
        surge_flag: bool = False,
        note: Optional[str] = None,
    ) -> OfferInput:
        return cls(
            platform=Platform(platform),
            pickup_zone=pickup_zone,
            dest_zone=dest_zone,
            fare=float(fare),
            eta_minutes=float(eta_minutes),
            distance_km=distance_km,
            surge_flag=surge_flag,
            note=note,
        )


@dataclass(frozen=True)
class BucketStats:
    """
    Aggregate over offers sharing (dest zone, time regime, day type, platform).
    """
    platform: Platform
    dest_zone: str
    time_regime: TimeRegime
    day_type: str
    sample_count: int
    recent_sample_count: int
    avg_rev_per_hour: float
    acceptance_ratio: float
    avg_next_offer_wait: Optional[float] = None


@dataclass(frozen=True)
class MoneyProofCounters:
    baseline_hourly: float
    followed_hourly: float
    baseline_count: int
    followed_count: int


@dataclass(frozen=True)
class ScoreComponents:
    effective_hourly: float
    post_dest_hourly: float
    total_score: float
    est_costs: float
    net_fare: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class PickRecommendation:
    action: Action  # TAKE | DECLINE
    confidence: OfferConfidence  # MEDIUM | STRONG
    reasons: List[str]
    platform_hint: Optional[Platform] = None
    stay_until_min: Optional[int] = None
    leave_if_min: Optional[int] = None
    suggested_zone: Optional[str] = None
    mode: Literal["PICK"] = "PICK"


@dataclass(frozen=True)
class GuideRecommendation:
    action: Action  # WAIT | MOVE
    confidence: OfferConfidence  # MEDIUM | STRONG
    reasons: List[str]
    stay_until_min: int
    leave_if_min: int
    suggested_zone: Optional[str] = None
    mode: Literal["GUIDE"] = "GUIDE"


@dataclass(frozen=True)
class CollectRecommendation:
    needed_samples: int
    instruction: str
    action: Action = Action.COLLECT
    confidence: OfferConfidence = OfferConfidence.WEAK
    mode: Literal["COLLECT"] = "COLLECT"


Recommendation = Union[PickRecommendation, GuideRecommendation, CollectRecommendation]


@dataclass(frozen=True)
class OfferScore:
    recommendation: Recommendation
    components: ScoreComponents


@dataclass(frozen=True)
class RecommendationDisplay:
    primary_action: str
    secondary_text: str
    confidence_label: str


@dataclass
class SavedOffer:
    """
    What the advisor hands back after scoring + persisting an offer.
    """
    offer: Optional[Offer]
    score: OfferScore
    warnings: List[str] = field(default_factory=list)
