"""Append-only persistence of AI activity and exam summaries.

Writes happen strictly after a successful completion. A failed write never
fails the request: it is logged as a ``PersistenceError`` and the caller
gets ``None`` back instead of a record id.
"""

from __future__ import annotations

import logging
import uuid
from typing import Mapping, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from estrategia_enem.core.exceptions import PersistenceError
from estrategia_enem.models.chat_exchange import ChatExchange
from estrategia_enem.models.essay_record import EssayRecord
from estrategia_enem.models.exam_result import ExamResult
from estrategia_enem.services.ai_service.essay_grading_service import EssayGrade
from estrategia_enem.services.ai_service.tutoring_service import ChatCompletion
from estrategia_enem.utils.enums import ActivityKind

logger = logging.getLogger(__name__)


async def _append(db: AsyncSession, record, kind: str) -> Optional[uuid.UUID]:
    """Insert one record; log and swallow datastore failures."""
    user_id = str(record.user_id)
    try:
        db.add(record)
        await db.commit()
        await db.refresh(record)
    except SQLAlchemyError as e:
        await db.rollback()
        error = PersistenceError(f"Erro ao salvar {kind}: {e}")
        logger.error(
            error.message,
            extra={"kind": kind, "user_id": user_id},
        )
        return None
    logger.info(f"Saved {kind} {record.id}")
    return record.id


async def persist_chat_exchange(
    db: AsyncSession,
    user_id: uuid.UUID,
    question: str,
    completion: ChatCompletion,
) -> Optional[uuid.UUID]:
    record = ChatExchange(
        user_id=user_id,
        question=question,
        answer=completion.answer,
        subject=completion.subject,
    )
    return await _append(db, record, "chat")


async def persist_essay_record(
    db: AsyncSession,
    user_id: uuid.UUID,
    theme: str,
    body: str,
    grade: EssayGrade,
) -> Optional[uuid.UUID]:
    c1, c2, c3, c4, c5 = grade.competencies
    record = EssayRecord(
        user_id=user_id,
        theme=theme,
        body=body,
        total_score=grade.total_score,
        competency_1=c1,
        competency_2=c2,
        competency_3=c3,
        competency_4=c4,
        competency_5=c5,
        feedback=grade.feedback,
    )
    return await _append(db, record, "essay")


async def persist_result(
    db: AsyncSession,
    kind: ActivityKind,
    user_id: uuid.UUID,
    inputs: Mapping[str, str],
    result: Union[ChatCompletion, EssayGrade],
) -> Optional[uuid.UUID]:
    """Store the outcome of a successful completion for ``kind``."""
    if ActivityKind(kind) == ActivityKind.chat:
        return await persist_chat_exchange(db, user_id, inputs["question"], result)
    return await persist_essay_record(db, user_id, inputs["theme"], inputs["body"], result)


async def persist_exam_result(
    db: AsyncSession,
    user_id: uuid.UUID,
    *,
    session_id: uuid.UUID,
    exam_type: str,
    subject: Optional[str],
    question_count: int,
    correct_count: int,
    percent_correct: int,
    time_spent_minutes: int,
) -> Optional[uuid.UUID]:
    record = ExamResult(
        user_id=user_id,
        session_id=session_id,
        type=exam_type,
        subject=subject,
        question_count=question_count,
        correct_count=correct_count,
        percent_correct=percent_correct,
        time_spent_minutes=time_spent_minutes,
    )
    return await _append(db, record, "exam result")
