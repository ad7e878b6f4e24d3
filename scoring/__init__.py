"""
Scoring domain package.

Public API:
- Domain models: Platform, DayMode, TimeRegime, ConfidenceLevel, Context,
  PlatformScore, RankingResult, EarningsLog
- Context resolution: resolve_context and label helpers
- Benchmark ranking: calculate_rankings, softmax
- Personal stats + dual-mode scoring: calculate_personal_stats, calculate_dual_ranking
- Demo data: DemoDataset, opportunity_score
"""
from .models import (
    PLATFORMS,
    ConfidenceLevel,
    Context,
    DayMode,
    EarningsLog,
    Platform,
    PlatformScore,
    RankingResult,
    TimeRegime,
    get_all_platforms,
    get_platform_display_name,
)
from .context import get_day_type_label, get_time_regime_label, resolve_context
from .ranking import calculate_rankings, get_demand_level, get_friction_level, softmax
from .personal import PersonalStats, calculate_personal_stats
from .dual import (
    DualRankingResult,
    ScoringMode,
    calculate_dual_ranking,
    has_enough_data_for_personal,
    record_count_for_zone,
)
from .demo import DemoDataset, opportunity_score
from .policy import (
    PersonalPolicy,
    RankingPolicy,
    TimeRegimePolicy,
    default_personal_policy,
    default_ranking_policy,
    default_regime_policy,
)

__all__ = [
    "PLATFORMS",
    "ConfidenceLevel",
    "Context",
    "DayMode",
    "EarningsLog",
    "Platform",
    "PlatformScore",
    "RankingResult",
    "TimeRegime",
    "get_all_platforms",
    "get_platform_display_name",
    "get_day_type_label",
    "get_time_regime_label",
    "resolve_context",
    "calculate_rankings",
    "get_demand_level",
    "get_friction_level",
    "softmax",
    "PersonalStats",
    "calculate_personal_stats",
    "DualRankingResult",
    "ScoringMode",
    "calculate_dual_ranking",
    "has_enough_data_for_personal",
    "record_count_for_zone",
    "DemoDataset",
    "opportunity_score",
    "PersonalPolicy",
    "RankingPolicy",
    "TimeRegimePolicy",
    "default_personal_policy",
    "default_ranking_policy",
    "default_regime_policy",
]
