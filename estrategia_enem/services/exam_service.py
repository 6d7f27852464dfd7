"""Datastore side of practice exams: loading questions and saving summaries."""

from __future__ import annotations

import logging
import random
import uuid
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from estrategia_enem.core.config import settings
from estrategia_enem.core.exceptions import SessionStateError, ValidationError
from estrategia_enem.models.exam_result import ExamResult
from estrategia_enem.models.question import Question
from estrategia_enem.services import exam_session
from estrategia_enem.services.exam_session import ExamSession, SessionQuestion
from estrategia_enem.services.persistence_service import persist_exam_result
from estrategia_enem.services.quota_service import get_user
from estrategia_enem.utils.enums import ExamStatus

logger = logging.getLogger(__name__)

ALL_SUBJECTS = "todas"
SESSION_FINISHED = "Este simulado já foi encerrado. Inicie um novo simulado."


def normalize_subject(subject: Optional[str]) -> Optional[str]:
    if subject is None:
        return None
    subject = subject.strip()
    if not subject or subject.lower() == ALL_SUBJECTS:
        return None
    return subject


def to_session_question(row: Question) -> SessionQuestion:
    return SessionQuestion(
        id=row.id,
        prompt=row.prompt,
        options=tuple(row.options or ()),
        correct_option=row.correct_option,
        subject=row.subject,
        difficulty=row.difficulty or 1,
    )


async def load_question_batch(
    db: AsyncSession,
    subject: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[SessionQuestion]:
    """Fetch up to ``EXAM_BATCH_SIZE`` questions, optionally for one subject."""
    query = select(Question).order_by(Question.created_at, Question.id).limit(
        limit or settings.EXAM_BATCH_SIZE
    )
    subject = normalize_subject(subject)
    if subject:
        query = query.where(Question.subject == subject)

    result = await db.execute(query)
    return [to_session_question(row) for row in result.scalars().all()]


async def load_questions_by_ids(
    db: AsyncSession, question_ids: Sequence[uuid.UUID]
) -> List[SessionQuestion]:
    """Load questions keeping the order of ``question_ids``."""
    if not question_ids:
        raise ValidationError("Sessão de simulado inválida")
    result = await db.execute(select(Question).where(Question.id.in_(list(question_ids))))
    by_id = {row.id: row for row in result.scalars().all()}
    missing = [str(qid) for qid in question_ids if qid not in by_id]
    if missing:
        logger.warning(f"Exam session references unknown questions: {', '.join(missing)}")
        raise ValidationError("Sessão de simulado inválida: questões não encontradas")
    return [to_session_question(by_id[qid]) for qid in question_ids]


async def start_exam(
    db: AsyncSession,
    user_id: uuid.UUID,
    subject: Optional[str] = None,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> ExamSession:
    """Load a batch for ``user_id`` and open a new session over it.

    Raises:
        ValidationError: If the user does not exist
        NoQuestionsError: If no question matches the filter
    """
    await get_user(db, user_id)
    subject = normalize_subject(subject)
    questions = await load_question_batch(db, subject)
    session = exam_session.start_session(questions, user_id, subject=subject, rng=rng, now=now)
    logger.info(
        f"Exam session {session.session_id} started: user={user_id} "
        f"subject={subject or ALL_SUBJECTS} questions={len(session.questions)}"
    )
    return session


async def restore_session(
    db: AsyncSession,
    *,
    session_id: uuid.UUID,
    user_id: uuid.UUID,
    subject: Optional[str],
    question_ids: Sequence[uuid.UUID],
    answers: dict,
    cursor: int,
    status: ExamStatus,
    started_at: datetime,
) -> ExamSession:
    """Rebuild a session value from its client-held state.

    Questions (and their correct options) are always re-read from the
    datastore, so the client never needs to hold the answer key.
    """
    if status != ExamStatus.in_progress:
        raise SessionStateError(SESSION_FINISHED)
    # A replayed state of a session that already finished
    await _ensure_not_recorded(db, session_id)
    if len(set(question_ids)) != len(question_ids):
        raise ValidationError("Sessão de simulado inválida")
    questions = await load_questions_by_ids(db, question_ids)
    if not 0 <= cursor < len(questions):
        raise ValidationError("Sessão de simulado inválida: posição fora do simulado")

    known_ids = {q.id for q in questions}
    if any(qid not in known_ids for qid in answers):
        raise ValidationError("Sessão de simulado inválida: resposta para questão desconhecida")

    return ExamSession(
        session_id=session_id,
        user_id=user_id,
        subject=normalize_subject(subject),
        questions=tuple(questions),
        answers=dict(answers),
        cursor=cursor,
        status=status,
        started_at=started_at,
    )


async def _ensure_not_recorded(db: AsyncSession, session_id: uuid.UUID) -> None:
    recorded = await db.scalar(
        select(func.count(ExamResult.id)).where(ExamResult.session_id == session_id)
    )
    if recorded:
        logger.warning(f"Exam session {session_id} replayed after its result was stored")
        raise SessionStateError(SESSION_FINISHED)


async def record_exam_result(db: AsyncSession, session: ExamSession) -> Optional[uuid.UUID]:
    """Persist the summary of a finished session.

    Raises:
        SessionStateError: If the session is still in progress or its result
            is already stored
    """
    if session.summary is None:
        raise SessionStateError("O simulado ainda não foi encerrado")
    await _ensure_not_recorded(db, session.session_id)
    summary = session.summary
    return await persist_exam_result(
        db,
        session.user_id,
        session_id=session.session_id,
        exam_type=session.exam_type.value,
        subject=session.subject,
        question_count=summary.question_count,
        correct_count=summary.correct_count,
        percent_correct=summary.percent_correct,
        time_spent_minutes=summary.time_spent_minutes,
    )
