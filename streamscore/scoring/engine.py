"""Legitimacy scoring pipeline.

    record x period settings -> intermediate metrics -> component scores
                             -> final score

Every stage is a pure function, so results can be memoised on the record's
content and the period settings.
"""
import logging
from datetime import timedelta
from typing import Sequence

from cachetools import LRUCache

from streamscore.config import get_settings
from streamscore.scoring.combinator import score_breakdown
from streamscore.scoring.metrics import reduce_records
from streamscore.scoring.normalizers import normalize
from streamscore.scoring.types import (
    PERIOD_DAYS,
    CalculationResult,
    PeriodSettings,
    ScoringSettings,
    StreamRecord,
)

logger = logging.getLogger(__name__)


def score_with_period_settings(record: StreamRecord, cfg: PeriodSettings) -> CalculationResult:
    """Score one record against the settings of its period."""
    window_end = record.date
    window_start = window_end - timedelta(days=PERIOD_DAYS[record.period])

    metrics = reduce_records([record])
    scores = normalize(metrics, cfg)
    breakdown = score_breakdown(
        scores,
        metrics.viewer_hours,
        cfg,
        record.include_messages,
        record.include_unique_chatters,
    )

    logger.debug(
        f"Scored {record.name} ({record.period.value} ending {window_end}): "
        f"{breakdown.final_score}"
    )

    return CalculationResult(
        window_start=window_start.isoformat(),
        window_end=window_end.isoformat(),
        intermediate_metrics=metrics,
        component_scores=scores,
        final_score=breakdown.final_score,
        breakdown=breakdown,
    )


def calculate_legitimacy_score(record: StreamRecord, settings: ScoringSettings) -> CalculationResult:
    """Score one record using the bucket for its period."""
    return score_with_period_settings(record, settings.for_period(record.period))


# Results keyed on (record without id, period settings)
score_cache: LRUCache = LRUCache(maxsize=get_settings().score_cache_size)


def calculate_cached(record: StreamRecord, cfg: PeriodSettings) -> CalculationResult:
    """Memoised scoring keyed on record content (the id is ignored)."""
    cache_key = (record.model_copy(update={"id": ""}), cfg)
    if cache_key in score_cache:
        return score_cache[cache_key]

    result = score_with_period_settings(record, cfg)
    score_cache[cache_key] = result
    return result


def score_records(
    records: Sequence[StreamRecord],
    settings: ScoringSettings,
) -> list[CalculationResult]:
    """Score each record independently, preserving input order."""
    return [calculate_cached(r, settings.for_period(r.period)) for r in records]


def clear_cache() -> None:
    score_cache.clear()
