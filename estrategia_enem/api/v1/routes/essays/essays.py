# Standard library imports
import logging
import uuid

# Third-party imports
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

# Local imports
from estrategia_enem.core.completion_client import CompletionClient, get_completion_client
from estrategia_enem.core.response import preflight_response, success_response
from estrategia_enem.db.deps import get_db
from estrategia_enem.schemas.essays import EssayCorrectionRequest, EssayRecordView
from estrategia_enem.services.ai_service.completion_service import request_completion
from estrategia_enem.services.ai_service.essay_grading_service import validate_essay
from estrategia_enem.services.persistence_service import persist_result
from estrategia_enem.services.quota_service import ensure_quota, get_user
from estrategia_enem.services.stats_service import recent_essays
from estrategia_enem.utils.enums import ActivityKind

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/essay-correction", tags=["essays"])


@router.options("")
async def essay_preflight():
    return preflight_response()


@router.post("")
async def correct_essay(
    request: EssayCorrectionRequest,
    db: AsyncSession = Depends(get_db),
    client: CompletionClient = Depends(get_completion_client),
):
    """Grade an essay against the five ENEM competencies"""
    # 1. Input checks happen before the quota lookup and any network call
    validate_essay(request.theme, request.body)

    # 2. Free plan: monthly correction limit
    await ensure_quota(db, request.user_id, ActivityKind.essay)

    # 3. Grade; unparseable model output falls back to the default grade
    inputs = {"theme": request.theme, "body": request.body}
    grade = await request_completion(ActivityKind.essay, inputs, client)

    # 4. Store; the correction is returned even if this fails
    record_id = await persist_result(db, ActivityKind.essay, request.user_id, inputs, grade)
    if record_id is None:
        logger.error(f"Essay correction for user {request.user_id} returned without being stored")

    return success_response(grade.to_response())


@router.get("/history")
async def essay_history(
    user_id: uuid.UUID = Query(..., alias="userId"),
    limit: int = Query(10, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
):
    """Most recent corrections, newest first"""
    await get_user(db, user_id)
    rows = await recent_essays(db, user_id, limit=limit)
    return success_response([EssayRecordView.from_record(row).to_wire() for row in rows])
