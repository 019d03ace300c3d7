"""Scoring domain types."""
import logging
import uuid
from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

class TimePeriod(str, Enum):
    """Supported reporting periods."""

    ONE_DAY = "1day"
    THIRTY_DAYS = "30days"
    SIXTY_DAYS = "60days"
    NINETY_DAYS = "90days"
    ONE_EIGHTY_DAYS = "180days"
    YEAR = "365days"


PERIOD_DAYS: dict[TimePeriod, int] = {
    TimePeriod.ONE_DAY: 1,
    TimePeriod.THIRTY_DAYS: 30,
    TimePeriod.SIXTY_DAYS: 60,
    TimePeriod.NINETY_DAYS: 90,
    TimePeriod.ONE_EIGHTY_DAYS: 180,
    TimePeriod.YEAR: 365,
}

PERIOD_LABELS: dict[TimePeriod, str] = {
    TimePeriod.ONE_DAY: "1 Day",
    TimePeriod.THIRTY_DAYS: "30 Days",
    TimePeriod.SIXTY_DAYS: "60 Days",
    TimePeriod.NINETY_DAYS: "90 Days",
    TimePeriod.ONE_EIGHTY_DAYS: "180 Days",
    TimePeriod.YEAR: "365 Days",
}


class MetricPresence(str, Enum):
    """Which optional engagement metrics a record carries."""

    BOTH = "both"
    MESSAGES_ONLY = "messages_only"
    CHATTERS_ONLY = "chatters_only"
    NONE = "none"

    @classmethod
    def from_flags(cls, include_messages: bool, include_unique_chatters: bool) -> "MetricPresence":
        if include_messages and include_unique_chatters:
            return cls.BOTH
        if include_messages:
            return cls.MESSAGES_ONLY
        if include_unique_chatters:
            return cls.CHATTERS_ONLY
        return cls.NONE

    @property
    def has_messages(self) -> bool:
        return self in (MetricPresence.BOTH, MetricPresence.MESSAGES_ONLY)

    @property
    def has_unique_chatters(self) -> bool:
        return self in (MetricPresence.BOTH, MetricPresence.CHATTERS_ONLY)


class _Frozen(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=AliasGenerator(validation_alias=to_camel),
        populate_by_name=True,
        loc_by_alias=False,
        allow_inf_nan=False,
    )


class PeriodSettings(_Frozen):
    """Caps, targets and weights for one period bucket.

    The weight fields are stored and validated but the final score uses
    fixed layer weights.
    """

    # Caps
    streams_cap: float = Field(gt=0)
    hours_cap: float = Field(gt=0)
    viewers_cap: float = Field(gt=0)
    follower_count_cap: Optional[float] = Field(default=None, gt=0)

    # Targets ("100% score")
    mpvm_target: float = Field(gt=0)
    ucp100_target: float = Field(gt=0)
    f1kvh_target: float = Field(gt=0, validation_alias="f1kVHTarget")
    min_viewer_hours: float = Field(ge=0)

    # Weights
    streams_weight: float = Field(default=0.0, ge=0)
    hours_weight: float = Field(default=0.0, ge=0)
    viewers_weight: float = Field(default=0.0, ge=0)
    mpvm_weight: float = Field(default=0.0, ge=0)
    ucp100_weight: float = Field(default=0.0, ge=0)
    f1kvh_weight: float = Field(default=0.0, ge=0, validation_alias="f1kVHWeight")
    consistency_weight: float = Field(default=0.0, ge=0)
    follower_count_weight: float = Field(default=0.0, ge=0)


class ScoringSettings(BaseModel):
    """Per-period settings map."""

    periods: dict[TimePeriod, PeriodSettings]

    def for_period(self, period: TimePeriod) -> PeriodSettings:
        """Settings for a period, falling back to the shipped defaults."""
        try:
            return self.periods[period]
        except KeyError:
            from streamscore.scoring.defaults import DEFAULT_PERIOD_SETTINGS

            logger.warning(f"No settings stored for period {period.value}, using defaults")
            return DEFAULT_PERIOD_SETTINGS[period]


# (include flag keys, metric keys), snake_case and camelCase spellings
_ENGAGEMENT_FLAGS = (
    (("include_messages", "includeMessages"), ("messages",)),
    (("include_unique_chatters", "includeUniqueChatters"), ("unique_chatters", "uniqueChatters")),
)
_FALSE_STRINGS = {"0", "off", "f", "false", "n", "no"}


def _is_false(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _FALSE_STRINGS
    return value is False or value == 0


class StreamRecord(_Frozen):
    """One streamer's aggregated activity over one declared period."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    date: date
    period: TimePeriod = TimePeriod.SIXTY_DAYS

    # Volume
    number_of_streams: int = Field(gt=0)
    hours: float = Field(gt=0)
    avg_viewers: float = Field(gt=0)

    # Engagement
    messages: int = Field(default=0, ge=0)
    unique_chatters: int = Field(default=0, ge=0)
    include_messages: bool = True
    include_unique_chatters: bool = True

    # Growth
    followers: int = Field(default=0, ge=0)
    follower_count: int = Field(default=0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _zero_excluded_metrics(cls, data: Any) -> Any:
        """An excluded engagement metric is stored as 0 whatever was sent."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for flag_keys, metric_keys in _ENGAGEMENT_FLAGS:
            flag = next((data[k] for k in flag_keys if k in data), True)
            if _is_false(flag):
                for key in metric_keys:
                    if key in data:
                        data[key] = 0
        return data

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Streamer name is required")
        return value

    @property
    def presence(self) -> MetricPresence:
        return MetricPresence.from_flags(self.include_messages, self.include_unique_chatters)


class IntermediateMetrics(_Frozen):
    """Metrics derived from the raw record(s) of one period."""

    total_streams: float = 0.0
    total_hours: float = 0.0
    weighted_avg_viewers: float = 0.0
    viewer_hours: float = 0.0
    mpvm: float = 0.0
    ucp100: float = 0.0
    f_per_1k_vh: float = Field(default=0.0, validation_alias="fPer1kVH")
    follower_spread_consistency: float = 0.0
    follower_count: float = 0.0


class ComponentScores(_Frozen):
    """Per-metric scores, each in [0, 100]."""

    streams_score: float = 0.0
    hours_score: float = 0.0
    viewers_score: float = 0.0
    mpvm_score: float = 0.0
    ucp100_score: float = 0.0
    f1kvh_score: float = Field(default=0.0, validation_alias="f1kVHScore")
    consistency_score: float = 0.0
    follower_count_score: float = 0.0


class LayerScores(_Frozen):
    """The five semantic layers the final score is built from."""

    activity: float
    reach: float
    engagement: float
    growth: float
    authority: float


class ScoreBreakdown(_Frozen):
    layers: LayerScores
    weights: LayerScores
    geometric_mean: float
    legitimacy_multiplier: float
    confidence_multiplier: float
    final_score: float


class CalculationResult(_Frozen):
    """Everything the scoring pipeline produces for one record."""

    window_start: str
    window_end: str
    intermediate_metrics: IntermediateMetrics
    component_scores: ComponentScores
    final_score: float
    breakdown: ScoreBreakdown


class FlagSeverity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"


class RedFlag(_Frozen):
    code: str
    severity: FlagSeverity
    message: str
