"""Legitimacy scoring engine and its pure collaborators."""
from streamscore.scoring.types import (
    PERIOD_DAYS,
    PERIOD_LABELS,
    CalculationResult,
    ComponentScores,
    FlagSeverity,
    IntermediateMetrics,
    LayerScores,
    MetricPresence,
    PeriodSettings,
    RedFlag,
    ScoreBreakdown,
    ScoringSettings,
    StreamRecord,
    TimePeriod,
)
from streamscore.scoring.defaults import DEFAULT_PERIOD_SETTINGS, default_scoring_settings
from streamscore.scoring.metrics import reduce_records
from streamscore.scoring.normalizers import normalize
from streamscore.scoring.combinator import combine, score_breakdown
from streamscore.scoring.red_flags import classify
from streamscore.scoring.engine import (
    calculate_cached,
    calculate_legitimacy_score,
    score_records,
    score_with_period_settings,
)

__all__ = [
    "PERIOD_DAYS",
    "PERIOD_LABELS",
    "CalculationResult",
    "ComponentScores",
    "FlagSeverity",
    "IntermediateMetrics",
    "LayerScores",
    "MetricPresence",
    "PeriodSettings",
    "RedFlag",
    "ScoreBreakdown",
    "ScoringSettings",
    "StreamRecord",
    "TimePeriod",
    "DEFAULT_PERIOD_SETTINGS",
    "default_scoring_settings",
    "reduce_records",
    "normalize",
    "combine",
    "score_breakdown",
    "classify",
    "calculate_cached",
    "calculate_legitimacy_score",
    "score_records",
    "score_with_period_settings",
]
