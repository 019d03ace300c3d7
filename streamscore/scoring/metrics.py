"""Fold period records into intermediate metrics."""
import math
from typing import Sequence

from streamscore.scoring.types import IntermediateMetrics, StreamRecord


def _number(value) -> float:
    """Missing or NaN values count as zero."""
    if value is None:
        return 0.0
    value = float(value)
    return 0.0 if math.isnan(value) else value


def reduce_records(records: Sequence[StreamRecord]) -> IntermediateMetrics:
    """Derive the intermediate metrics for records sharing one period.

    Scoring currently passes a single record, in which case the follower
    spread consistency is always 1 whenever any followers were gained.
    """
    if not records:
        return IntermediateMetrics()

    total_streams = sum(_number(r.number_of_streams) for r in records)
    total_hours = sum(_number(r.hours) for r in records)

    # Viewers weighted by sqrt(hours) so short streams are discounted gently
    sqrt_hours = [math.sqrt(max(0.0, _number(r.hours))) for r in records]
    sum_weights = sum(sqrt_hours)
    sum_weighted_viewers = sum(
        _number(r.avg_viewers) * weight for r, weight in zip(records, sqrt_hours)
    )
    weighted_avg_viewers = sum_weighted_viewers / sum_weights if sum_weights > 0 else 0.0

    viewer_hours = sum(_number(r.avg_viewers) * _number(r.hours) for r in records)

    total_messages = sum(_number(r.messages) for r in records if r.include_messages)
    mpvm = total_messages / (viewer_hours * 60) if viewer_hours > 0 else 0.0

    total_chatters = sum(
        _number(r.unique_chatters) for r in records if r.include_unique_chatters
    )
    ucp100 = (total_chatters / weighted_avg_viewers) * 100 if weighted_avg_viewers > 0 else 0.0

    gained = [_number(r.followers) for r in records]
    f_per_1k_vh = (sum(gained) / viewer_hours) * 1000 if viewer_hours > 0 else 0.0

    # 1 / (1 + coefficient of variation), population standard deviation
    mean_gained = sum(gained) / len(gained)
    if mean_gained > 0:
        variance = sum((g - mean_gained) ** 2 for g in gained) / len(gained)
        consistency = 1 / (1 + math.sqrt(variance) / mean_gained)
    else:
        consistency = 0.0

    follower_count = sum(_number(r.follower_count) for r in records) / len(records)

    return IntermediateMetrics(
        total_streams=total_streams,
        total_hours=total_hours,
        weighted_avg_viewers=weighted_avg_viewers,
        viewer_hours=viewer_hours,
        mpvm=mpvm,
        ucp100=ucp100,
        f_per_1k_vh=f_per_1k_vh,
        follower_spread_consistency=consistency,
        follower_count=follower_count,
    )
