from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from topgamescore.db.models.groups import Group


class GroupsRepo:
    @staticmethod
    async def server_now(session: AsyncSession) -> datetime:
        result = await session.execute(select(func.now()))
        return result.scalar_one()

    @staticmethod
    async def get_by_id(session: AsyncSession, group_id: str) -> Group | None:
        return await session.get(Group, group_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, group_id: str) -> Group | None:
        stmt = select(Group).where(Group.id == group_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(session: AsyncSession, *, group: Group) -> Group:
        session.add(group)
        await session.flush()
        return group

    @staticmethod
    async def set_plan_for_host(
        session: AsyncSession,
        *,
        host_id: str,
        plan: str,
        expires_at: datetime | None,
        now_utc: datetime,
    ) -> int:
        stmt = (
            update(Group)
            .where(Group.host_id == host_id, Group.plan != plan)
            .values(plan=plan, expires_at=expires_at, updated_at=now_utc)
            .returning(Group.id)
        )
        result = await session.execute(stmt)
        return len(result.scalars().all())

    @staticmethod
    async def delete_expired_free_batch(
        session: AsyncSession,
        *,
        now_utc: datetime,
        limit: int,
    ) -> list[str]:
        expired_ids = (
            select(Group.id)
            .where(
                Group.plan == "free",
                Group.expires_at.is_not(None),
                Group.expires_at <= now_utc,
            )
            .order_by(Group.expires_at.asc())
            .limit(limit)
            .with_for_update(skip_locked=True)
            .scalar_subquery()
        )
        stmt = delete(Group).where(Group.id.in_(expired_ids)).returning(Group.id)
        result = await session.execute(stmt)
        return list(result.scalars().all())
