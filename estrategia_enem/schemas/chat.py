import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from estrategia_enem.schemas.base import CamelModel


class ChatRequest(CamelModel):
    question: str = Field(..., description="The student's question", examples=["O que é estequiometria?"])
    subject: Optional[str] = Field(None, description="Subject tag", examples=["quimica"])
    user_id: uuid.UUID

    @field_validator("question")
    @classmethod
    def question_not_empty(cls, v):
        if v is None or v.strip() == "":
            raise ValueError("Pergunta e userId são obrigatórios")
        return v.strip()


class ChatResponse(CamelModel):
    answer: str


class ChatExchangeView(CamelModel):
    id: uuid.UUID
    question: str
    answer: Optional[str] = None
    subject: Optional[str] = None
    created_at: datetime
