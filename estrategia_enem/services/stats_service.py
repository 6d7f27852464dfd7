"""Read side for history lists and the statistics page."""

from __future__ import annotations

import uuid
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from estrategia_enem.models.chat_exchange import ChatExchange
from estrategia_enem.models.essay_record import EssayRecord
from estrategia_enem.models.exam_result import ExamResult
from estrategia_enem.models.progress import ProgressEntry
from estrategia_enem.services.quota_service import get_user
from estrategia_enem.utils.datetime_utils import get_current_utc_datetime


async def recent_chat_exchanges(db: AsyncSession, user_id: uuid.UUID, limit: int = 20) -> List[ChatExchange]:
    result = await db.execute(
        select(ChatExchange)
        .where(ChatExchange.user_id == user_id)
        .order_by(ChatExchange.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def recent_essays(db: AsyncSession, user_id: uuid.UUID, limit: int = 10) -> List[EssayRecord]:
    result = await db.execute(
        select(EssayRecord)
        .where(EssayRecord.user_id == user_id)
        .order_by(EssayRecord.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def recent_exam_results(db: AsyncSession, user_id: uuid.UUID, limit: int = 5) -> List[ExamResult]:
    result = await db.execute(
        select(ExamResult)
        .where(ExamResult.user_id == user_id)
        .order_by(ExamResult.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


def _round_or_none(value: Optional[float]) -> Optional[int]:
    return None if value is None else int(round(float(value)))


async def user_statistics(
    db: AsyncSession,
    user_id: uuid.UUID,
    days: int = 7,
    today: Optional[date] = None,
) -> dict:
    """Totals and averages for one user.

    Study hours and the per-subject breakdown only cover the last ``days``
    days of ``progress`` entries; the exam and essay figures cover all time.
    """
    await get_user(db, user_id)
    today = today or get_current_utc_datetime().date()
    since = today - timedelta(days=days - 1)

    exams = (
        await db.execute(
            select(
                func.count(ExamResult.id),
                func.avg(ExamResult.percent_correct),
                func.max(ExamResult.percent_correct),
                func.coalesce(func.sum(ExamResult.time_spent_minutes), 0),
            ).where(ExamResult.user_id == user_id)
        )
    ).one()
    essays = (
        await db.execute(
            select(
                func.count(EssayRecord.id),
                func.avg(EssayRecord.total_score),
                func.max(EssayRecord.total_score),
            ).where(EssayRecord.user_id == user_id)
        )
    ).one()
    chat_total = (
        await db.execute(select(func.count(ChatExchange.id)).where(ChatExchange.user_id == user_id))
    ).scalar_one()

    subject_rows = (
        await db.execute(
            select(
                ProgressEntry.subject,
                func.coalesce(func.sum(ProgressEntry.hours), 0.0),
                func.avg(ProgressEntry.percent_correct),
            )
            .where(ProgressEntry.user_id == user_id, ProgressEntry.activity_date >= since)
            .group_by(ProgressEntry.subject)
            .order_by(ProgressEntry.subject)
        )
    ).all()

    return {
        "exams": {
            "total": exams[0],
            "averagePercent": _round_or_none(exams[1]),
            "bestPercent": exams[2],
            "minutesSpent": int(exams[3]),
        },
        "essays": {
            "total": essays[0],
            "averageScore": _round_or_none(essays[1]),
            "bestScore": essays[2],
        },
        "chatQuestions": chat_total,
        "studyHours": round(sum(float(row[1]) for row in subject_rows), 1),
        "subjects": [
            {
                "subject": row[0],
                "hours": round(float(row[1]), 1),
                "averagePercent": _round_or_none(row[2]),
            }
            for row in subject_rows
        ],
        "periodDays": days,
    }
