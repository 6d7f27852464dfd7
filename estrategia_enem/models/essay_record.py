import uuid
from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from estrategia_enem.db.deps import Base
from estrategia_enem.utils.datetime_utils import get_current_utc_datetime

COMPETENCY_COLUMNS = (
    "competency_1",
    "competency_2",
    "competency_3",
    "competency_4",
    "competency_5",
)


class EssayRecord(Base):
    __tablename__ = "essay_records"
    __table_args__ = (
        CheckConstraint("total_score BETWEEN 0 AND 1000", name="ck_essay_records_total_score"),
        CheckConstraint(
            "total_score = competency_1 + competency_2 + competency_3 + competency_4 + competency_5",
            name="ck_essay_records_total_is_sum",
        ),
    )

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    theme = Column(Text, nullable=False)
    body = Column(Text, nullable=False)
    total_score = Column(Integer, nullable=False)
    competency_1 = Column(Integer, nullable=False)
    competency_2 = Column(Integer, nullable=False)
    competency_3 = Column(Integer, nullable=False)
    competency_4 = Column(Integer, nullable=False)
    competency_5 = Column(Integer, nullable=False)
    feedback = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=get_current_utc_datetime, nullable=False, index=True)

    user = relationship("User", back_populates="essay_records")

    @property
    def competencies(self) -> list[int]:
        return [getattr(self, name) for name in COMPETENCY_COLUMNS]
