"""Red flags shown alongside a score. They never change the score itself."""
from streamscore.scoring.types import CalculationResult, FlagSeverity, RedFlag, StreamRecord

# Audience sizes above which weak engagement is suspicious
CRITICAL_VIEWERS = 50
WARNING_VIEWERS = 30


def classify(result: CalculationResult, record: StreamRecord) -> list[RedFlag]:
    """Flag suspicious conditions in the order they are checked."""
    viewers = result.intermediate_metrics.weighted_avg_viewers
    scores = result.component_scores
    presence = record.presence
    flags = []

    if presence.has_messages and viewers > CRITICAL_VIEWERS and scores.mpvm_score < 20:
        flags.append(RedFlag(
            code="very_low_chat_activity",
            severity=FlagSeverity.CRITICAL,
            message=(
                f"Very low chat activity for {viewers:.0f} average viewers. "
                "Possible viewbotting."
            ),
        ))

    if presence.has_unique_chatters and viewers > CRITICAL_VIEWERS and scores.ucp100_score < 20:
        flags.append(RedFlag(
            code="very_low_chatter_participation",
            severity=FlagSeverity.CRITICAL,
            message=(
                f"Very few unique chatters for {viewers:.0f} average viewers. "
                "Audience may not be organic."
            ),
        ))

    if presence.has_messages and viewers > WARNING_VIEWERS and 20 <= scores.mpvm_score < 40:
        flags.append(RedFlag(
            code="low_chat_activity",
            severity=FlagSeverity.WARNING,
            message="Chat activity is below average for this audience size.",
        ))

    if presence.has_unique_chatters and viewers > WARNING_VIEWERS and 20 <= scores.ucp100_score < 40:
        flags.append(RedFlag(
            code="low_chatter_participation",
            severity=FlagSeverity.WARNING,
            message="Chatter participation is below average for this audience size.",
        ))

    if scores.hours_score > 70 and scores.f1kvh_score < 30:
        flags.append(RedFlag(
            code="low_follower_conversion",
            severity=FlagSeverity.WARNING,
            message="Many hours streamed but few followers gained.",
        ))

    if scores.consistency_score < 30:
        flags.append(RedFlag(
            code="inconsistent_growth",
            severity=FlagSeverity.WARNING,
            message="Follower growth is uneven across the period.",
        ))

    if viewers > CRITICAL_VIEWERS and scores.f1kvh_score < 20:
        flags.append(RedFlag(
            code="audience_not_following",
            severity=FlagSeverity.WARNING,
            message="Viewers are not converting into followers.",
        ))

    return flags
