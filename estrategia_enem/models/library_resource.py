import uuid
from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from estrategia_enem.db.deps import Base
from estrategia_enem.utils.datetime_utils import get_current_utc_datetime


class LibraryResource(Base):
    __tablename__ = "library_resources"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String, nullable=False)
    kind = Column(String, nullable=False)  # resumo, video, exercicio...
    subject = Column(String, nullable=False, index=True)
    summary = Column(Text, nullable=True)
    content = Column(Text, nullable=True)
    url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=get_current_utc_datetime, nullable=False)
