from __future__ import annotations

from datetime import datetime

from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from topgamescore.db.models.host_accounts import HostAccount


class HostAccountsRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, account_id: str) -> HostAccount | None:
        return await session.get(HostAccount, account_id)

    @staticmethod
    async def upsert_plan(
        session: AsyncSession,
        *,
        account_id: str,
        plan: str,
        active: bool,
        current_period_end: datetime | None,
        now_utc: datetime,
    ) -> None:
        stmt = insert(HostAccount).values(
            id=account_id,
            plan=plan,
            active=active,
            current_period_end=current_period_end,
            updated_at=now_utc,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[HostAccount.id],
            set_={
                "plan": stmt.excluded.plan,
                "active": stmt.excluded.active,
                "current_period_end": stmt.excluded.current_period_end,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        await session.execute(stmt)
