import uuid
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from estrategia_enem.schemas.base import CamelModel
from estrategia_enem.services.exam_session import ExamSession
from estrategia_enem.utils.enums import ExamStatus


class StartExamRequest(CamelModel):
    user_id: uuid.UUID
    subject: Optional[str] = Field(None, description="Subject filter; omit or 'todas' for all")


class PublicQuestion(CamelModel):
    """A question as shown to the student, without the answer key."""

    id: uuid.UUID
    prompt: str
    options: List[str]
    subject: str
    difficulty: int


class ExamResultView(CamelModel):
    question_count: int
    correct_count: int
    percent_correct: int
    time_spent_minutes: int


class ExamSessionState(CamelModel):
    """Client-held exam session.

    ``questions`` is informational; only ``question_ids`` is trusted when the
    state comes back in a request.
    """

    session_id: uuid.UUID
    user_id: uuid.UUID
    subject: Optional[str] = None
    question_ids: List[uuid.UUID]
    questions: List[PublicQuestion] = Field(default_factory=list)
    answers: Dict[uuid.UUID, str] = Field(default_factory=dict)
    cursor: int = 0
    status: ExamStatus = ExamStatus.in_progress
    started_at: datetime
    finished_at: Optional[datetime] = None
    result: Optional[ExamResultView] = None
    result_id: Optional[uuid.UUID] = None

    @classmethod
    def from_session(cls, session: ExamSession, result_id: Optional[uuid.UUID] = None) -> "ExamSessionState":
        result = None
        if session.summary is not None:
            result = ExamResultView(**session.summary.model_dump())
        return cls(
            session_id=session.session_id,
            user_id=session.user_id,
            subject=session.subject,
            question_ids=[q.id for q in session.questions],
            questions=[
                PublicQuestion(
                    id=q.id,
                    prompt=q.prompt,
                    options=list(q.options),
                    subject=q.subject,
                    difficulty=q.difficulty,
                )
                for q in session.questions
            ],
            answers=dict(session.answers),
            cursor=session.cursor,
            status=session.status,
            started_at=session.started_at,
            finished_at=session.finished_at,
            result=result,
            result_id=result_id,
        )


class SelectAnswerRequest(CamelModel):
    session: ExamSessionState
    question_id: uuid.UUID
    option: str


class SessionRequest(CamelModel):
    session: ExamSessionState


class ExamResultRecordView(CamelModel):
    id: uuid.UUID
    type: str
    subject: Optional[str] = None
    question_count: int
    correct_count: int
    percent_correct: int
    time_spent_minutes: int
    created_at: datetime
