"""Per-period scoring settings model."""
from datetime import datetime
from sqlalchemy import Column, String, Integer, Float, DateTime

from streamscore.database import Base
from streamscore.scoring.migrations import SETTINGS_SCHEMA_VERSION
from streamscore.scoring.types import PeriodSettings


class PeriodSettingsRow(Base):
    """Caps, targets and weights for one period bucket."""

    __tablename__ = "period_settings"

    period = Column(String(16), primary_key=True)

    # Caps
    streams_cap = Column(Float, nullable=False)
    hours_cap = Column(Float, nullable=False)
    viewers_cap = Column(Float, nullable=False)
    follower_count_cap = Column(Float)  # NULL falls back to the shipped cap

    # Targets
    mpvm_target = Column(Float, nullable=False)
    ucp100_target = Column(Float, nullable=False)
    f1kvh_target = Column(Float, nullable=False)
    min_viewer_hours = Column(Float, nullable=False)

    # Weights (stored for display; not used by the final score)
    streams_weight = Column(Float, default=0)
    hours_weight = Column(Float, default=0)
    viewers_weight = Column(Float, default=0)
    mpvm_weight = Column(Float, default=0)
    ucp100_weight = Column(Float, default=0)
    f1kvh_weight = Column(Float, default=0)
    consistency_weight = Column(Float, default=0)
    follower_count_weight = Column(Float, default=0)

    # Metadata
    schema_version = Column(Integer, nullable=False, default=SETTINGS_SCHEMA_VERSION)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    def apply(self, cfg: PeriodSettings):
        for key, value in cfg.model_dump().items():
            setattr(self, key, value)
        self.schema_version = SETTINGS_SCHEMA_VERSION

    def to_settings(self) -> PeriodSettings:
        return PeriodSettings.model_validate(
            {key: getattr(self, key) for key in PeriodSettings.model_fields}
        )
