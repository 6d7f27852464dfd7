# Standard library imports
import logging
import uuid

# Third-party imports
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

# Local imports
from estrategia_enem.core.response import preflight_response, success_response
from estrategia_enem.db.deps import get_db
from estrategia_enem.schemas.exams import (
    ExamResultRecordView,
    ExamSessionState,
    SelectAnswerRequest,
    SessionRequest,
    StartExamRequest,
)
from estrategia_enem.services import exam_service, exam_session
from estrategia_enem.services.exam_session import ExamSession
from estrategia_enem.services.quota_service import get_user
from estrategia_enem.services.stats_service import recent_exam_results

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/exams", tags=["exams"])


async def _restore(db: AsyncSession, state: ExamSessionState) -> ExamSession:
    return await exam_service.restore_session(
        db,
        session_id=state.session_id,
        user_id=state.user_id,
        subject=state.subject,
        question_ids=state.question_ids,
        answers=state.answers,
        cursor=state.cursor,
        status=state.status,
        started_at=state.started_at,
    )


async def _respond(db: AsyncSession, session: ExamSession):
    """Persist the summary the moment a session finishes, then answer."""
    result_id = None
    if session.is_finished:
        result_id = await exam_service.record_exam_result(db, session)
        logger.info(
            f"Exam session {session.session_id} {session.status.value}: "
            f"{session.summary.correct_count}/{session.summary.question_count}"
        )
    return success_response(ExamSessionState.from_session(session, result_id=result_id).to_wire())


@router.options("/{path:path}")
async def exams_preflight(path: str):
    return preflight_response()


@router.post("/start")
async def start_exam(request: StartExamRequest, db: AsyncSession = Depends(get_db)):
    """Open a practice exam over a shuffled batch of questions"""
    session = await exam_service.start_exam(db, request.user_id, request.subject)
    return await _respond(db, session)


@router.post("/answer")
async def select_answer(request: SelectAnswerRequest, db: AsyncSession = Depends(get_db)):
    """Record the chosen option for one question"""
    session = await _restore(db, request.session)
    session = exam_session.select_answer(session, request.question_id, request.option)
    return await _respond(db, session)


@router.post("/advance")
async def advance(request: SessionRequest, db: AsyncSession = Depends(get_db)):
    """Go to the next question, or finish on the last one"""
    session = await _restore(db, request.session)
    session = exam_session.advance(session)
    return await _respond(db, session)


@router.post("/abandon")
async def abandon(request: SessionRequest, db: AsyncSession = Depends(get_db)):
    """Stop the exam early and keep its summary"""
    session = await _restore(db, request.session)
    session = exam_session.abandon(session)
    return await _respond(db, session)


@router.get("/history")
async def exam_history(
    user_id: uuid.UUID = Query(..., alias="userId"),
    limit: int = Query(5, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
):
    """Most recent exam results, newest first"""
    await get_user(db, user_id)
    rows = await recent_exam_results(db, user_id, limit=limit)
    return success_response([ExamResultRecordView.model_validate(row).to_wire() for row in rows])
