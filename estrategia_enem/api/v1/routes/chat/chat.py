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
from estrategia_enem.schemas.chat import ChatExchangeView, ChatRequest, ChatResponse
from estrategia_enem.services.ai_service.completion_service import request_completion
from estrategia_enem.services.persistence_service import persist_result
from estrategia_enem.services.quota_service import ensure_quota, get_user
from estrategia_enem.services.stats_service import recent_chat_exchanges
from estrategia_enem.utils.enums import ActivityKind

# Initialize logger
logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/chat", tags=["chat"])


@router.options("")
async def chat_preflight():
    return preflight_response()


# Ask the AI tutor
@router.post("", response_model=ChatResponse)
async def ask_question(
    request: ChatRequest,
    db: AsyncSession = Depends(get_db),
    client: CompletionClient = Depends(get_completion_client),
):
    """Answer a student's question with the ENEM tutor"""
    # 1. Free plan: daily question limit
    await ensure_quota(db, request.user_id, ActivityKind.chat)

    # 2. Ask the completion endpoint; failures abort before anything is stored
    inputs = {"question": request.question, "subject": request.subject}
    completion = await request_completion(ActivityKind.chat, inputs, client)

    # 3. Store the exchange; a storage failure does not hide the answer
    record_id = await persist_result(db, ActivityKind.chat, request.user_id, inputs, completion)
    if record_id is None:
        logger.error(f"Chat answer for user {request.user_id} returned without being stored")

    return success_response(ChatResponse(answer=completion.answer).to_wire())


@router.get("/history")
async def chat_history(
    user_id: uuid.UUID = Query(..., alias="userId"),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Most recent tutor exchanges, newest first"""
    await get_user(db, user_id)
    rows = await recent_chat_exchanges(db, user_id, limit=limit)
    return success_response([ChatExchangeView.model_validate(row).to_wire() for row in rows])
