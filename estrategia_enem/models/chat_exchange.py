import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from estrategia_enem.db.deps import Base
from estrategia_enem.utils.datetime_utils import get_current_utc_datetime


class ChatExchange(Base):
    __tablename__ = "chat_exchanges"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    question = Column(Text, nullable=False)
    answer = Column(Text, nullable=True)
    subject = Column(String, nullable=True)
    # Written by the application clock; quota windows are computed from it too
    created_at = Column(DateTime(timezone=True), default=get_current_utc_datetime, nullable=False, index=True)

    user = relationship("User", back_populates="chat_exchanges")
