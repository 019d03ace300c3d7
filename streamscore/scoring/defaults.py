"""Shipped period settings."""
from streamscore.scoring.types import PeriodSettings, ScoringSettings, TimePeriod

DEFAULT_FOLLOWER_COUNT_CAP = 10000

# Audience caps and ratio targets do not depend on period length
_SHARED = {
    "viewers_cap": 1000,
    "follower_count_cap": DEFAULT_FOLLOWER_COUNT_CAP,
    "mpvm_target": 0.05,
    "ucp100_target": 30,
    "f1kvh_target": 15,
    "streams_weight": 0.10,
    "hours_weight": 0.15,
    "viewers_weight": 0.20,
    "mpvm_weight": 0.15,
    "ucp100_weight": 0.10,
    "f1kvh_weight": 0.15,
    "consistency_weight": 0.05,
    "follower_count_weight": 0.10,
}

# (streams_cap, hours_cap, min_viewer_hours): one stream and one hour per day,
# with a viewer-hour floor of 0.8 per day
_VOLUME = {
    TimePeriod.ONE_DAY: (1, 4, 4),
    TimePeriod.THIRTY_DAYS: (30, 30, 24),
    TimePeriod.SIXTY_DAYS: (60, 60, 48),
    TimePeriod.NINETY_DAYS: (90, 90, 72),
    TimePeriod.ONE_EIGHTY_DAYS: (180, 180, 144),
    TimePeriod.YEAR: (365, 365, 292),
}

DEFAULT_PERIOD_SETTINGS: dict[TimePeriod, PeriodSettings] = {
    period: PeriodSettings(
        streams_cap=streams_cap,
        hours_cap=hours_cap,
        min_viewer_hours=min_viewer_hours,
        **_SHARED,
    )
    for period, (streams_cap, hours_cap, min_viewer_hours) in _VOLUME.items()
}


def default_scoring_settings() -> ScoringSettings:
    """A fresh settings map holding every shipped bucket."""
    return ScoringSettings(periods=dict(DEFAULT_PERIOD_SETTINGS))
