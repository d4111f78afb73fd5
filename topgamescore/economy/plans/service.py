from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from topgamescore.core.config import get_settings
from topgamescore.db.repo.groups_repo import GroupsRepo
from topgamescore.db.repo.host_accounts_repo import HostAccountsRepo
from topgamescore.economy.plans.constants import PLAN_FREE, PLAN_PRO, PLANS
from topgamescore.economy.plans.rules import is_pro_active, resolve_group_expiry
from topgamescore.economy.plans.types import PlanChangeResult
from topgamescore.game.errors import ValidationError

logger = structlog.get_logger(__name__)


class PlanService:
    @staticmethod
    async def is_host_pro(session: AsyncSession, *, host_id: str | None) -> bool:
        if not host_id:
            return False
        account = await HostAccountsRepo.get_by_id(session, host_id)
        if account is None:
            return False
        return is_pro_active(plan=account.plan, active=account.active)

    @staticmethod
    async def apply_plan_change(
        session: AsyncSession,
        *,
        account_id: str,
        plan: str,
        active: bool,
        now_utc: datetime,
        current_period_end: datetime | None = None,
    ) -> PlanChangeResult:
        if plan not in PLANS:
            raise ValidationError(f"unknown plan: {plan}")
        if not account_id:
            raise ValidationError("account id is required")

        await HostAccountsRepo.upsert_plan(
            session,
            account_id=account_id,
            plan=plan,
            active=active,
            current_period_end=current_period_end,
            now_utc=now_utc,
        )

        is_pro = is_pro_active(plan=plan, active=active)
        group_plan = PLAN_PRO if is_pro else PLAN_FREE
        # A downgrade starts a fresh retention window instead of expiring old groups at once.
        expires_at = resolve_group_expiry(
            plan=group_plan,
            reference_utc=now_utc,
            ttl_days=get_settings().free_group_ttl_days,
        )
        groups_updated = await GroupsRepo.set_plan_for_host(
            session,
            host_id=account_id,
            plan=group_plan,
            expires_at=expires_at,
            now_utc=now_utc,
        )
        logger.info(
            "host_plan_synced",
            account_id=account_id,
            plan=group_plan,
            groups_updated=groups_updated,
        )
        return PlanChangeResult(
            account_id=account_id,
            plan=group_plan,
            is_pro=is_pro,
            groups_updated=groups_updated,
            expires_at=expires_at,
        )
