import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from estrategia_enem.db.deps import Base
from estrategia_enem.utils.datetime_utils import get_current_utc_datetime


class StudyPlan(Base):
    __tablename__ = "study_plans"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    focus_area = Column(String, nullable=False)
    plan_content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=get_current_utc_datetime, nullable=False)

    user = relationship("User", back_populates="study_plans")
