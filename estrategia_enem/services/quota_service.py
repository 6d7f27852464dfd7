"""Free-plan usage quotas for AI features.

Quotas are derived, never stored: the number of activity records a user has
created since the start of the current window is compared with the plan
limit. Chat questions use a daily window, essay corrections a monthly one.

The check is read-only and reserves nothing, so two concurrent requests from
the same free user can both pass before either record is written. That is a
known best-effort limitation, not a hard limit.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from estrategia_enem.core.config import settings
from estrategia_enem.core.exceptions import QuotaExceededError, ValidationError
from estrategia_enem.models.chat_exchange import ChatExchange
from estrategia_enem.models.essay_record import EssayRecord
from estrategia_enem.models.user import User
from estrategia_enem.utils.datetime_utils import (
    get_current_utc_datetime,
    start_of_day,
    start_of_month,
)
from estrategia_enem.utils.enums import ActivityKind, PlanTier

logger = logging.getLogger(__name__)

DENIAL_MESSAGES = {
    ActivityKind.chat: "Limite diário de perguntas atingido. Faça upgrade para Premium!",
    ActivityKind.essay: "Limite mensal de correções atingido. Faça upgrade para Premium!",
}


@dataclass(frozen=True)
class QuotaDecision:
    allowed: bool
    kind: ActivityKind
    plan: PlanTier
    used: int
    limit: Optional[int]  # None means unlimited
    window_start: Optional[datetime] = None
    reason: Optional[str] = None

    @property
    def remaining(self) -> Optional[int]:
        if self.limit is None:
            return None
        return max(self.limit - self.used, 0)


def quota_limit(kind: ActivityKind) -> int:
    if kind == ActivityKind.chat:
        return settings.CHAT_DAILY_LIMIT
    return settings.ESSAY_MONTHLY_LIMIT


def window_start_for(kind: ActivityKind, now: datetime) -> datetime:
    if kind == ActivityKind.chat:
        return start_of_day(now)
    return start_of_month(now)


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise ValidationError("Usuário não encontrado")
    return user


async def count_activity_since(
    db: AsyncSession, user_id: uuid.UUID, kind: ActivityKind, since: datetime
) -> int:
    model = ChatExchange if kind == ActivityKind.chat else EssayRecord
    result = await db.execute(
        select(func.count())
        .select_from(model)
        .where(model.user_id == user_id, model.created_at >= since)
    )
    return int(result.scalar_one())


async def check_quota(
    db: AsyncSession,
    user_id: uuid.UUID,
    kind: ActivityKind,
    now: Optional[datetime] = None,
) -> QuotaDecision:
    """Decide whether ``user_id`` may perform one more ``kind`` activity.

    Args:
        db: Database session
        user_id: Id of an existing user
        kind: chat or essay
        now: Reference instant, defaults to the current UTC time

    Returns:
        QuotaDecision with ``allowed`` set and, when denied, an upgrade prompt
        in ``reason``

    Raises:
        ValidationError: If the user does not exist
    """
    kind = ActivityKind(kind)
    user = await get_user(db, user_id)
    plan = user.effective_plan

    if plan == PlanTier.premium:
        return QuotaDecision(allowed=True, kind=kind, plan=plan, used=0, limit=None)

    now = now or get_current_utc_datetime()
    since = window_start_for(kind, now)
    limit = quota_limit(kind)
    used = await count_activity_since(db, user.id, kind, since)

    if used >= limit:
        logger.info(f"Quota denied: user={user.id} kind={kind.value} used={used} limit={limit}")
        return QuotaDecision(
            allowed=False,
            kind=kind,
            plan=plan,
            used=used,
            limit=limit,
            window_start=since,
            reason=DENIAL_MESSAGES[kind],
        )

    return QuotaDecision(
        allowed=True, kind=kind, plan=plan, used=used, limit=limit, window_start=since
    )


async def ensure_quota(
    db: AsyncSession,
    user_id: uuid.UUID,
    kind: ActivityKind,
    now: Optional[datetime] = None,
) -> QuotaDecision:
    """Like :func:`check_quota` but raises ``QuotaExceededError`` on denial."""
    decision = await check_quota(db, user_id, kind, now=now)
    if not decision.allowed:
        raise QuotaExceededError(
            decision.reason,
            activity=decision.kind.value,
            plan=decision.plan.value,
            used=decision.used,
            limit=decision.limit,
        )
    return decision


async def get_usage_summary(
    db: AsyncSession, user_id: uuid.UUID, now: Optional[datetime] = None
) -> dict:
    """Both quotas for one user, shaped for the usage endpoint."""
    now = now or get_current_utc_datetime()
    summary = {}
    for kind in ActivityKind:
        decision = await check_quota(db, user_id, kind, now=now)
        summary[kind.value] = {
            "allowed": decision.allowed,
            "used": decision.used,
            "limit": decision.limit,
            "remaining": decision.remaining,
            "window": "daily" if kind == ActivityKind.chat else "monthly",
        }
        plan = decision.plan
    summary["plan"] = plan.value
    return summary
