import uuid
from sqlalchemy import Column, String, Integer, Float, Date, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from estrategia_enem.db.deps import Base
from estrategia_enem.utils.datetime_utils import get_current_utc_datetime


class ProgressEntry(Base):
    __tablename__ = "progress"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    subject = Column(String, nullable=False)
    hours = Column(Float, nullable=True)
    percent_correct = Column(Integer, nullable=True)
    activity_date = Column(Date, nullable=False, default=lambda: get_current_utc_datetime().date())
    created_at = Column(DateTime(timezone=True), default=get_current_utc_datetime, nullable=False)

    user = relationship("User", back_populates="progress_entries")
