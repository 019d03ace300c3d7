"""Stream record model."""
from datetime import datetime
from sqlalchemy import Column, String, Integer, Float, Boolean, Date, DateTime

from streamscore.database import Base
from streamscore.scoring.migrations import RECORD_SCHEMA_VERSION
from streamscore.scoring.types import StreamRecord


class StreamRecordRow(Base):
    """A stored period record for one streamer."""

    __tablename__ = "stream_records"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    period = Column(String(16), nullable=False)

    # Volume
    number_of_streams = Column(Integer, nullable=False)
    hours = Column(Float, nullable=False)
    avg_viewers = Column(Float, nullable=False)

    # Engagement
    messages = Column(Integer, default=0)
    unique_chatters = Column(Integer, default=0)
    include_messages = Column(Boolean, default=True)
    include_unique_chatters = Column(Boolean, default=True)

    # Growth
    followers = Column(Integer, default=0)
    follower_count = Column(Integer, default=0)

    # Metadata
    schema_version = Column(Integer, nullable=False, default=RECORD_SCHEMA_VERSION)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    @classmethod
    def from_record(cls, record: StreamRecord) -> "StreamRecordRow":
        data = record.model_dump()
        data["period"] = record.period.value
        return cls(**data, schema_version=RECORD_SCHEMA_VERSION)

    def update_from(self, record: StreamRecord):
        for key, value in record.model_dump(exclude={"id"}).items():
            setattr(self, key, value)
        self.period = record.period.value
        self.schema_version = RECORD_SCHEMA_VERSION

    def to_record(self) -> StreamRecord:
        return StreamRecord(
            id=self.id,
            name=self.name,
            date=self.date,
            period=self.period,
            number_of_streams=self.number_of_streams,
            hours=self.hours,
            avg_viewers=self.avg_viewers,
            messages=self.messages or 0,
            unique_chatters=self.unique_chatters or 0,
            include_messages=bool(self.include_messages),
            include_unique_chatters=bool(self.include_unique_chatters),
            followers=self.followers or 0,
            follower_count=self.follower_count or 0,
        )
