import uuid
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from estrategia_enem.db.deps import Base
from estrategia_enem.utils.datetime_utils import get_current_utc_datetime


class ExamResult(Base):
    __tablename__ = "exam_results"
    __table_args__ = (
        # One result per exam session
        UniqueConstraint("session_id", name="uq_exam_results_session_id"),
    )

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    session_id = Column(PG_UUID(as_uuid=True), nullable=False)
    type = Column(String, nullable=False, default="geral")
    subject = Column(String, nullable=True)
    question_count = Column(Integer, nullable=False)
    correct_count = Column(Integer, nullable=False)
    percent_correct = Column(Integer, nullable=False)
    time_spent_minutes = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=get_current_utc_datetime, nullable=False, index=True)

    user = relationship("User", back_populates="exam_results")
