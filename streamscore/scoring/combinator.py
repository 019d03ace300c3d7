"""Combine component scores into the final legitimacy score.

The final score is a weighted geometric mean over five layers, so every
layer has to perform for the score to be high. Two independent gates are
applied on top of it:

- the legitimacy multiplier, a 90% penalty when chat activity is too low
  for the audience to be organic (the viewbot heuristic), and
- the confidence multiplier, a linear discount when the period holds less
  watch time than ``min_viewer_hours``.

Layer weights are fixed here. ``PeriodSettings`` weight fields are not used.
"""
import logging
import math

from streamscore.scoring.types import (
    ComponentScores,
    LayerScores,
    MetricPresence,
    PeriodSettings,
    ScoreBreakdown,
)

logger = logging.getLogger(__name__)

DEFAULT_LAYER_WEIGHTS = LayerScores(
    activity=0.25,
    reach=0.20,
    engagement=0.25,
    growth=0.15,
    authority=0.15,
)

# Used when neither engagement metric was supplied
NO_ENGAGEMENT_LAYER_WEIGHTS = LayerScores(
    activity=0.30,
    reach=0.25,
    engagement=0.0,
    growth=0.20,
    authority=0.25,
)

LAYER_FLOOR = 0.01
PENALTY_MULTIPLIER = 0.1
MIN_UCP100 = 0.5
MIN_MPVM = 0.0001


def layer_scores(scores: ComponentScores, presence: MetricPresence) -> LayerScores:
    """Aggregate component scores into the five semantic layers."""
    if presence is MetricPresence.BOTH:
        # Geometric mean: one near-zero metric collapses the layer
        engagement = math.sqrt((scores.mpvm_score / 100) * (scores.ucp100_score / 100)) * 100
    elif presence is MetricPresence.MESSAGES_ONLY:
        engagement = scores.mpvm_score
    elif presence is MetricPresence.CHATTERS_ONLY:
        engagement = scores.ucp100_score
    else:
        engagement = 100.0

    return LayerScores(
        activity=(scores.streams_score / 100 * 0.4 + scores.hours_score / 100 * 0.6) * 100,
        reach=scores.viewers_score,
        engagement=engagement,
        growth=(scores.f1kvh_score / 100 * 0.7 + scores.consistency_score / 100 * 0.3) * 100,
        authority=scores.follower_count_score,
    )


def layer_weights(presence: MetricPresence) -> LayerScores:
    if presence is MetricPresence.NONE:
        return NO_ENGAGEMENT_LAYER_WEIGHTS
    return DEFAULT_LAYER_WEIGHTS


def legitimacy_multiplier(
    scores: ComponentScores,
    cfg: PeriodSettings,
    presence: MetricPresence,
) -> float:
    """1.0 for organic-looking engagement, 0.1 otherwise.

    Raw ratios are estimated back from the capped scores, so a score of 100
    reads as exactly the target.
    """
    est_ucp100 = (scores.ucp100_score / 100) * cfg.ucp100_target
    est_mpvm = (scores.mpvm_score / 100) * cfg.mpvm_target
    has_chatters = est_ucp100 >= MIN_UCP100
    has_messages = est_mpvm > MIN_MPVM

    if presence is MetricPresence.BOTH:
        passed = has_chatters and has_messages
    elif presence is MetricPresence.MESSAGES_ONLY:
        passed = has_messages
    elif presence is MetricPresence.CHATTERS_ONLY:
        passed = has_chatters
    else:
        passed = True

    return 1.0 if passed else PENALTY_MULTIPLIER


def confidence_multiplier(viewer_hours: float, cfg: PeriodSettings) -> float:
    """Linear sample-size discount, no floor."""
    if cfg.min_viewer_hours <= 0:
        return 1.0
    return max(0.0, min(1.0, viewer_hours / cfg.min_viewer_hours))


def weighted_geometric_mean(layers: LayerScores, weights: LayerScores) -> float:
    """Product of clamped layer multipliers raised to their weights."""
    result = 1.0
    multipliers = {}
    for name, weight in weights.model_dump().items():
        multiplier = max(LAYER_FLOOR, min(1.0, getattr(layers, name) / 100))
        multipliers[name] = multiplier
        if weight > 0:
            result *= multiplier ** weight
    logger.debug(f"Layer multipliers: {multipliers}")
    return result


def score_breakdown(
    scores: ComponentScores,
    viewer_hours: float,
    cfg: PeriodSettings,
    include_messages: bool = True,
    include_unique_chatters: bool = True,
) -> ScoreBreakdown:
    """Run every combination step and keep the intermediate values."""
    presence = MetricPresence.from_flags(include_messages, include_unique_chatters)
    layers = layer_scores(scores, presence)
    weights = layer_weights(presence)

    geometric_mean = weighted_geometric_mean(layers, weights)
    legitimacy = legitimacy_multiplier(scores, cfg, presence)
    confidence = confidence_multiplier(viewer_hours, cfg)
    logger.debug(f"Legitimacy multiplier: {legitimacy}, confidence multiplier: {confidence}")

    raw = geometric_mean * 100 * legitimacy * confidence
    final_score = min(100.0, max(0.0, round(raw, 1)))

    return ScoreBreakdown(
        layers=layers,
        weights=weights,
        geometric_mean=geometric_mean,
        legitimacy_multiplier=legitimacy,
        confidence_multiplier=confidence,
        final_score=final_score,
    )


def combine(
    scores: ComponentScores,
    viewer_hours: float,
    cfg: PeriodSettings,
    include_messages: bool = True,
    include_unique_chatters: bool = True,
) -> float:
    """Final 0-100 score, one decimal place."""
    return score_breakdown(
        scores, viewer_hours, cfg, include_messages, include_unique_chatters
    ).final_score
