import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from estrategia_enem.core.response import success_response
from estrategia_enem.db.deps import get_db
from estrategia_enem.services.quota_service import get_usage_summary
from estrategia_enem.services.stats_service import user_statistics

router = APIRouter(tags=["stats"])


@router.get("/usage")
async def usage(
    user_id: uuid.UUID = Query(..., alias="userId"),
    db: AsyncSession = Depends(get_db),
):
    """Free-plan quota usage for chat and essay correction"""
    return success_response(await get_usage_summary(db, user_id))


@router.get("/stats")
async def stats(
    user_id: uuid.UUID = Query(..., alias="userId"),
    days: int = Query(7, ge=1, le=365),
    db: AsyncSession = Depends(get_db),
):
    """Totals and averages shown on the statistics page"""
    return success_response(await user_statistics(db, user_id, days=days))
