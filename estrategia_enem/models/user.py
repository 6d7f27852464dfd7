import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Enum
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from estrategia_enem.db.deps import Base
from estrategia_enem.utils.datetime_utils import get_current_utc_datetime
from estrategia_enem.utils.enums import PlanTier


class User(Base):
    __tablename__ = "users"

    # Same id the authentication provider issues
    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    objective = Column(String, nullable=True)
    plan = Column(Enum(PlanTier), nullable=False, default=PlanTier.free)
    is_premium = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=get_current_utc_datetime, nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=get_current_utc_datetime)

    chat_exchanges = relationship("ChatExchange", back_populates="user", cascade="all, delete-orphan")
    essay_records = relationship("EssayRecord", back_populates="user", cascade="all, delete-orphan")
    exam_results = relationship("ExamResult", back_populates="user", cascade="all, delete-orphan")
    study_plans = relationship("StudyPlan", back_populates="user", cascade="all, delete-orphan")
    progress_entries = relationship("ProgressEntry", back_populates="user", cascade="all, delete-orphan")

    @property
    def effective_plan(self) -> PlanTier:
        """Premium when either the plan column or the premium flag says so."""
        if self.is_premium or self.plan == PlanTier.premium:
            return PlanTier.premium
        return PlanTier.free
