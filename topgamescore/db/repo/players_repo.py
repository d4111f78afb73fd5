from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from topgamescore.db.models.players import Player


class PlayersRepo:
    @staticmethod
    async def get(session: AsyncSession, *, group_id: str, player_id: str) -> Player | None:
        return await session.get(Player, (group_id, player_id))

    @staticmethod
    async def get_for_update(session: AsyncSession, *, group_id: str, player_id: str) -> Player | None:
        stmt = (
            select(Player)
            .where(Player.group_id == group_id, Player.player_id == player_id)
            .with_for_update()
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create_once(
        session: AsyncSession,
        *,
        group_id: str,
        player_id: str,
        name: str,
        handle: str,
        joined_at: datetime,
    ) -> bool:
        stmt = (
            insert(Player)
            .values(
                group_id=group_id,
                player_id=player_id,
                name=name,
                handle=handle,
                total_score=0,
                joined_at=joined_at,
                current_question_index=-1,
                question_started_at=None,
            )
            .on_conflict_do_nothing(index_elements=[Player.group_id, Player.player_id])
            .returning(Player.player_id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def update_display(
        session: AsyncSession,
        *,
        group_id: str,
        player_id: str,
        name: str,
        handle: str,
    ) -> int:
        stmt = (
            update(Player)
            .where(Player.group_id == group_id, Player.player_id == player_id)
            .values(name=name, handle=handle)
            .returning(Player.player_id)
        )
        result = await session.execute(stmt)
        return int(result.scalar_one_or_none() is not None)

    @staticmethod
    async def increment_total_score(
        session: AsyncSession,
        *,
        group_id: str,
        player_id: str,
        delta: int,
    ) -> int | None:
        stmt = (
            update(Player)
            .where(Player.group_id == group_id, Player.player_id == player_id)
            .values(total_score=Player.total_score + delta)
            .returning(Player.total_score)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def raise_total_score_to(
        session: AsyncSession,
        *,
        group_id: str,
        player_id: str,
        total_score: int,
    ) -> int:
        stmt = (
            update(Player)
            .where(
                Player.group_id == group_id,
                Player.player_id == player_id,
                Player.total_score < total_score,
            )
            .values(total_score=total_score)
            .returning(Player.player_id)
        )
        result = await session.execute(stmt)
        return int(result.scalar_one_or_none() is not None)

    @staticmethod
    async def set_current_question(
        session: AsyncSession,
        *,
        group_id: str,
        player_id: str,
        q_index: int,
        started_at: datetime,
    ) -> None:
        stmt = (
            update(Player)
            .where(Player.group_id == group_id, Player.player_id == player_id)
            .values(current_question_index=q_index, question_started_at=started_at)
        )
        await session.execute(stmt)

    @staticmethod
    async def list_for_group(session: AsyncSession, *, group_id: str) -> list[Player]:
        stmt = (
            select(Player)
            .where(Player.group_id == group_id)
            .order_by(Player.total_score.desc(), Player.name.asc(), Player.player_id.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
