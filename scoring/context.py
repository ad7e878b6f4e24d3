"""
Purpose: Resolve a wall-clock timestamp into its (day-mode, time-regime) bucket.
What it does:
- WEEKEND = Saturday, Sunday, or Friday from 20:00 (fractional hours, minute precision)
- time regime = the half-open band of TimeRegimePolicy containing the hour
Pure and deterministic; recomputed on every query.
"""

from __future__ import annotations

import time
from datetime import datetime
from typing import Optional, Union

from .models import Context, DayMode, TimeRegime
from .policy import TimeRegimePolicy, _in_band, default_regime_policy

Timestamp = Union[datetime, int, float]

_FRIDAY = 4
_SATURDAY = 5
_SUNDAY = 6

TIME_REGIME_LABELS = {
    TimeRegime.MORNING_RUSH: "Morning Rush (05-09)",
    TimeRegime.MIDDAY: "Midday (09-15)",
    TimeRegime.EVENING_RUSH: "Evening Rush (15-19)",
    TimeRegime.LATE_NIGHT: "Late Night (19-01)",
    TimeRegime.OVERNIGHT: "Overnight (01-05)",
}


def now_ms() -> int:
    return int(time.time() * 1000)


def to_datetime(when: Optional[Timestamp] = None) -> datetime:
    """
    Epoch milliseconds are interpreted in the local timezone, like the phone clock.
    """
    if when is None:
        return datetime.now()
    if isinstance(when, datetime):
        return when
    return datetime.fromtimestamp(when / 1000)


def to_epoch_ms(when: Optional[Timestamp] = None) -> int:
    if when is None:
        return now_ms()
    if isinstance(when, datetime):
        return int(when.timestamp() * 1000)
    return int(when)


def fractional_hour(moment: datetime) -> float:
    return moment.hour + moment.minute / 60


def resolve_day_mode(moment: datetime, policy: Optional[TimeRegimePolicy] = None) -> DayMode:
    policy = policy or default_regime_policy()
    weekday = moment.weekday()
    weekend = weekday in (_SATURDAY, _SUNDAY)
    friday_late = weekday == _FRIDAY and fractional_hour(moment) >= policy.friday_weekend_from_hour
    return DayMode.WEEKEND if (weekend or friday_late) else DayMode.WEEKDAY


def resolve_time_regime(moment: datetime, policy: Optional[TimeRegimePolicy] = None) -> TimeRegime:
    policy = policy or default_regime_policy()
    hour = fractional_hour(moment)
    for regime, start, end in policy.bands:
        if _in_band(hour, start, end):
            return regime
    # validate() guarantees full coverage
    raise ValueError(f"No time-regime band covers {hour:.2f}h")


def resolve_context(when: Optional[Timestamp] = None, policy: Optional[TimeRegimePolicy] = None) -> Context:
    moment = to_datetime(when)
    return Context(
        day_mode=resolve_day_mode(moment, policy),
        time_regime=resolve_time_regime(moment, policy),
    )


def get_time_regime_label(regime: str | TimeRegime) -> str:
    return TIME_REGIME_LABELS[TimeRegime(regime)]


def get_day_type_label(day_type: str) -> str:
    return "Weekend" if day_type.lower() == "weekend" else "Weekday"
