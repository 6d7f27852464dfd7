import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from estrategia_enem.schemas.base import CamelModel


class EssayCorrectionRequest(CamelModel):
    theme: str = Field(..., description="Essay theme")
    # Length is checked by the grading service so the error message matches the product copy
    body: str = Field(..., description="Essay text, at least 100 characters")
    user_id: uuid.UUID


class EssayRecordView(CamelModel):
    id: uuid.UUID
    theme: str
    total_score: int
    competencies: dict[str, int]
    feedback: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_record(cls, record) -> "EssayRecordView":
        return cls(
            id=record.id,
            theme=record.theme,
            total_score=record.total_score,
            competencies={
                f"competency{i}": score for i, score in enumerate(record.competencies, start=1)
            },
            feedback=record.feedback,
            created_at=record.created_at,
        )
