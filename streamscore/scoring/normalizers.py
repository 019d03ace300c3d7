"""Map intermediate metrics onto 0-100 component scores."""
import math

from streamscore.scoring.defaults import DEFAULT_FOLLOWER_COUNT_CAP
from streamscore.scoring.types import ComponentScores, IntermediateMetrics, PeriodSettings


def _ratio(value: float, denominator: float) -> float:
    """value / denominator, or 0 when the denominator is not positive."""
    if not denominator or denominator <= 0 or math.isnan(value):
        return 0.0
    return value / denominator


def sqrt_score(value: float, cap: float) -> float:
    """Square-root curve: early progress counts most, flat once the cap is hit."""
    return min(100.0, 100 * math.sqrt(max(0.0, _ratio(value, cap))))


def log_score(value: float, cap: float) -> float:
    """Logarithmic curve so small and large audiences compare fairly."""
    if not value or value <= 0 or math.isnan(value) or cap <= 0:
        return 0.0
    return min(100.0, 100 * math.log10(1 + value) / math.log10(1 + cap))


def linear_score(value: float, target: float) -> float:
    """Straight ratio to a target, capped at 100."""
    return min(100.0, max(0.0, 100 * _ratio(value, target)))


def normalize(metrics: IntermediateMetrics, cfg: PeriodSettings) -> ComponentScores:
    """Compute the eight component scores for one period."""
    return ComponentScores(
        streams_score=sqrt_score(metrics.total_streams, cfg.streams_cap),
        hours_score=sqrt_score(metrics.total_hours, cfg.hours_cap),
        viewers_score=log_score(metrics.weighted_avg_viewers, cfg.viewers_cap),
        mpvm_score=linear_score(metrics.mpvm, cfg.mpvm_target),
        ucp100_score=linear_score(metrics.ucp100, cfg.ucp100_target),
        f1kvh_score=linear_score(metrics.f_per_1k_vh, cfg.f1kvh_target),
        consistency_score=min(100.0, max(0.0, 100 * metrics.follower_spread_consistency)),
        follower_count_score=log_score(
            metrics.follower_count,
            cfg.follower_count_cap or DEFAULT_FOLLOWER_COUNT_CAP,
        ),
    )
