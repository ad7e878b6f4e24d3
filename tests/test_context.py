from datetime import datetime

import pytest

from scoring.context import (
    get_day_type_label,
    get_time_regime_label,
    resolve_context,
    to_datetime,
    to_epoch_ms,
)
from scoring.models import DayMode, TimeRegime
from scoring.policy import TimeRegimePolicy


@pytest.mark.parametrize(
    "moment, day_mode, regime",
    [
        (datetime(2024, 3, 13, 7, 30), DayMode.WEEKDAY, TimeRegime.MORNING_RUSH),
        (datetime(2024, 3, 13, 9, 0), DayMode.WEEKDAY, TimeRegime.MIDDAY),
        (datetime(2024, 3, 13, 14, 59), DayMode.WEEKDAY, TimeRegime.MIDDAY),
        (datetime(2024, 3, 13, 15, 0), DayMode.WEEKDAY, TimeRegime.EVENING_RUSH),
        (datetime(2024, 3, 13, 19, 0), DayMode.WEEKDAY, TimeRegime.LATE_NIGHT),
        (datetime(2024, 3, 14, 0, 30), DayMode.WEEKDAY, TimeRegime.LATE_NIGHT),
        (datetime(2024, 3, 14, 1, 0), DayMode.WEEKDAY, TimeRegime.OVERNIGHT),
        (datetime(2024, 3, 14, 4, 59), DayMode.WEEKDAY, TimeRegime.OVERNIGHT),
        (datetime(2024, 3, 14, 5, 0), DayMode.WEEKDAY, TimeRegime.MORNING_RUSH),
    ],
)
def test_time_regime_bands(moment, day_mode, regime):
    context = resolve_context(moment)
    assert context.day_mode == day_mode
    assert context.time_regime == regime


def test_friday_evening_starts_the_weekend():
    assert resolve_context(datetime(2024, 3, 15, 19, 59)).day_mode == DayMode.WEEKDAY
    assert resolve_context(datetime(2024, 3, 15, 20, 0)).day_mode == DayMode.WEEKEND
    assert resolve_context(datetime(2024, 3, 16, 10, 0)).day_mode == DayMode.WEEKEND
    assert resolve_context(datetime(2024, 3, 17, 23, 0)).day_mode == DayMode.WEEKEND
    assert resolve_context(datetime(2024, 3, 18, 0, 30)).day_mode == DayMode.WEEKDAY


def test_context_day_type_spelling():
    weekend = resolve_context(datetime(2024, 3, 16, 0, 30))
    assert weekend.day_type == "weekend"
    assert weekend.weekend_mode is True
    assert weekend.time_regime == TimeRegime.LATE_NIGHT

    weekday = resolve_context(datetime(2024, 3, 13, 12, 0))
    assert weekday.day_type == "weekday"
    assert weekday.weekend_mode is False


def test_epoch_ms_and_datetime_agree():
    moment = datetime(2024, 3, 15, 21, 15)
    ms = to_epoch_ms(moment)
    assert to_datetime(ms) == moment
    assert resolve_context(ms) == resolve_context(moment)


def test_labels():
    assert get_time_regime_label("late-night") == "Late Night (19-01)"
    assert get_time_regime_label(TimeRegime.MIDDAY) == "Midday (09-15)"
    assert get_day_type_label("weekend") == "Weekend"
    assert get_day_type_label("WEEKDAY") == "Weekday"


def test_regime_policy_rejects_gaps_and_overlaps():
    gap = TimeRegimePolicy(bands=[
        (TimeRegime.MORNING_RUSH, 5.0, 9.0),
        (TimeRegime.MIDDAY, 9.0, 15.0),
    ])
    with pytest.raises(ValueError):
        gap.validate()

    overlap = TimeRegimePolicy(bands=[
        (TimeRegime.MIDDAY, 0.0, 15.0),
        (TimeRegime.EVENING_RUSH, 14.0, 0.0),
    ])
    with pytest.raises(ValueError):
        overlap.validate()

    TimeRegimePolicy().validate()
