"""SQLAlchemy models."""
from streamscore.models.records import StreamRecordRow
from streamscore.models.period_settings import PeriodSettingsRow

__all__ = [
    "StreamRecordRow",
    "PeriodSettingsRow",
]
