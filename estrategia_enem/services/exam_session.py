"""Practice exam session state machine.

A session is a plain immutable value. Every operation takes the current
session and returns a new one; nothing is kept between calls.

    in_progress --advance() on last question--> completed
    in_progress --abandon()-------------------> abandoned
"""

from __future__ import annotations

import random
import uuid
from datetime import datetime
from typing import Dict, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from estrategia_enem.core.exceptions import (
    NoQuestionsError,
    SessionStateError,
    UnansweredQuestionError,
    ValidationError,
)
from estrategia_enem.utils.datetime_utils import ensure_utc, get_current_utc_datetime
from estrategia_enem.utils.enums import ExamStatus, ExamType


class SessionQuestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    prompt: str
    options: Tuple[str, ...]
    correct_option: str
    subject: str
    difficulty: int = 1


class ExamSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    question_count: int
    correct_count: int
    percent_correct: int
    time_spent_minutes: int


class ExamSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    session_id: uuid.UUID = Field(default_factory=uuid.uuid4)
    user_id: uuid.UUID
    subject: Optional[str] = None
    questions: Tuple[SessionQuestion, ...]
    answers: Dict[uuid.UUID, str] = Field(default_factory=dict)
    cursor: int = 0
    status: ExamStatus = ExamStatus.in_progress
    started_at: datetime
    finished_at: Optional[datetime] = None
    summary: Optional[ExamSummary] = None

    @property
    def current_question(self) -> SessionQuestion:
        return self.questions[self.cursor]

    @property
    def is_last_question(self) -> bool:
        return self.cursor == len(self.questions) - 1

    @property
    def exam_type(self) -> ExamType:
        return ExamType.subject if self.subject else ExamType.general

    @property
    def is_finished(self) -> bool:
        return self.status != ExamStatus.in_progress


def _require_in_progress(session: ExamSession) -> None:
    if session.status != ExamStatus.in_progress:
        raise SessionStateError("Este simulado já foi encerrado. Inicie um novo simulado.")


def _round_half_up(numerator: int, denominator: int) -> int:
    """round(numerator / denominator) with .5 going up, in integer arithmetic."""
    return (2 * numerator + denominator) // (2 * denominator)


def start_session(
    questions: Sequence[SessionQuestion],
    user_id: uuid.UUID,
    subject: Optional[str] = None,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> ExamSession:
    """Create an in-progress session over a shuffled copy of ``questions``.

    Only the order of the questions is shuffled; the options inside each
    question keep their order. Repeated question ids are kept once.

    Raises:
        NoQuestionsError: If ``questions`` is empty
    """
    unique: Dict[uuid.UUID, SessionQuestion] = {}
    for question in questions:
        unique.setdefault(question.id, question)
    if not unique:
        raise NoQuestionsError("Não há questões disponíveis para esta matéria.")

    order = list(unique.values())
    (rng or random.Random()).shuffle(order)

    return ExamSession(
        user_id=user_id,
        subject=subject,
        questions=tuple(order),
        started_at=ensure_utc(now or get_current_utc_datetime()),
    )


def select_answer(session: ExamSession, question_id: uuid.UUID, option: str) -> ExamSession:
    """Record (or overwrite) the chosen option; the cursor does not move."""
    _require_in_progress(session)

    question = next((q for q in session.questions if q.id == question_id), None)
    if question is None:
        raise ValidationError("Questão não pertence a este simulado")
    if option not in question.options:
        raise ValidationError("Alternativa inválida para esta questão")

    if session.answers.get(question_id) == option:
        return session
    return session.model_copy(update={"answers": {**session.answers, question_id: option}})


def score_session(session: ExamSession, now: Optional[datetime] = None) -> ExamSummary:
    """Summary over the whole question list; unanswered questions count as wrong."""
    total = len(session.questions)
    correct = sum(1 for q in session.questions if session.answers.get(q.id) == q.correct_option)
    finished_at = ensure_utc(now or get_current_utc_datetime())
    elapsed_seconds = max((finished_at - ensure_utc(session.started_at)).total_seconds(), 0.0)
    return ExamSummary(
        question_count=total,
        correct_count=correct,
        # start_session never builds an empty session
        percent_correct=_round_half_up(100 * correct, total),
        time_spent_minutes=int(elapsed_seconds / 60 + 0.5),
    )


def _finish(session: ExamSession, status: ExamStatus, now: Optional[datetime]) -> ExamSession:
    finished_at = ensure_utc(now or get_current_utc_datetime())
    return session.model_copy(
        update={
            "status": status,
            "finished_at": finished_at,
            "summary": score_session(session, now=finished_at),
        }
    )


def advance(session: ExamSession, now: Optional[datetime] = None) -> ExamSession:
    """Move to the next question, or complete the session on the last one.

    Raises:
        SessionStateError: If the session is already finished
        UnansweredQuestionError: If the current question has no answer yet;
            the cursor is left where it was
    """
    _require_in_progress(session)
    if session.current_question.id not in session.answers:
        raise UnansweredQuestionError("Selecione uma alternativa antes de avançar")

    if not session.is_last_question:
        return session.model_copy(update={"cursor": session.cursor + 1})
    return _finish(session, ExamStatus.completed, now)


def abandon(session: ExamSession, now: Optional[datetime] = None) -> ExamSession:
    """Stop the session early; the summary covers every question in it."""
    _require_in_progress(session)
    return _finish(session, ExamStatus.abandoned, now)
