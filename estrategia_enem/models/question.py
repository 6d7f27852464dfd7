import uuid
from sqlalchemy import Column, String, Integer, Text, DateTime, JSON, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from estrategia_enem.db.deps import Base
from estrategia_enem.utils.datetime_utils import get_current_utc_datetime


class Question(Base):
    __tablename__ = "questions"
    __table_args__ = (
        CheckConstraint("difficulty BETWEEN 1 AND 3", name="ck_questions_difficulty"),
    )

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    prompt = Column(Text, nullable=False)
    options = Column(JSON, nullable=False)  # ordered list of option strings
    correct_option = Column(String, nullable=False)
    subject = Column(String, nullable=False, index=True)
    difficulty = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), default=get_current_utc_datetime, nullable=False)
