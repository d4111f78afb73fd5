from __future__ import annotations

from datetime import datetime

from sqlalchemy import distinct, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from topgamescore.db.models.answers import Answer


class AnswersRepo:
    @staticmethod
    async def get(
        session: AsyncSession,
        *,
        group_id: str,
        player_id: str,
        q_index: int,
    ) -> Answer | None:
        return await session.get(Answer, (group_id, player_id, q_index))

    @staticmethod
    async def create_once(
        session: AsyncSession,
        *,
        group_id: str,
        player_id: str,
        q_index: int,
        chosen_index: int | None,
        correct: bool,
        elapsed_ms: int | None,
        score_awarded: int,
        created_at: datetime,
    ) -> bool:
        stmt = (
            insert(Answer)
            .values(
                group_id=group_id,
                player_id=player_id,
                q_index=q_index,
                chosen_index=chosen_index,
                correct=correct,
                elapsed_ms=elapsed_ms,
                score_awarded=score_awarded,
                created_at=created_at,
            )
            .on_conflict_do_nothing(
                index_elements=[Answer.group_id, Answer.player_id, Answer.q_index]
            )
            .returning(Answer.q_index)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def list_answered_indexes(
        session: AsyncSession,
        *,
        group_id: str,
        player_id: str,
    ) -> list[int]:
        stmt = (
            select(Answer.q_index)
            .where(Answer.group_id == group_id, Answer.player_id == player_id)
            .order_by(Answer.q_index.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_for_group(session: AsyncSession, *, group_id: str) -> list[Answer]:
        stmt = (
            select(Answer)
            .where(Answer.group_id == group_id)
            .order_by(Answer.player_id.asc(), Answer.q_index.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def sum_scores_by_player(session: AsyncSession, *, group_id: str) -> dict[str, int]:
        stmt = (
            select(Answer.player_id, func.coalesce(func.sum(Answer.score_awarded), 0))
            .where(Answer.group_id == group_id)
            .group_by(Answer.player_id)
        )
        result = await session.execute(stmt)
        return {str(player_id): int(total) for player_id, total in result.all()}

    @staticmethod
    async def list_group_ids_answered_since(
        session: AsyncSession,
        *,
        since_utc: datetime,
        limit: int,
    ) -> list[str]:
        stmt = (
            select(distinct(Answer.group_id))
            .where(Answer.created_at >= since_utc)
            .order_by(Answer.group_id.asc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
