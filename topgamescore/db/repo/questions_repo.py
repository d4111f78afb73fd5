from __future__ import annotations

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from topgamescore.db.models.questions import Question


class QuestionsRepo:
    @staticmethod
    async def list_for_group(session: AsyncSession, *, group_id: str) -> list[Question]:
        stmt = select(Question).where(Question.group_id == group_id).order_by(Question.index.asc())
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_by_index(session: AsyncSession, *, group_id: str, index: int) -> Question | None:
        return await session.get(Question, (group_id, index))

    @staticmethod
    async def count_for_group(session: AsyncSession, *, group_id: str) -> int:
        stmt = select(func.count()).select_from(Question).where(Question.group_id == group_id)
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def create(session: AsyncSession, *, question: Question) -> Question:
        session.add(question)
        await session.flush()
        return question

    @staticmethod
    async def delete_and_reindex(session: AsyncSession, *, group_id: str, index: int) -> bool:
        result = await session.execute(
            delete(Question)
            .where(Question.group_id == group_id, Question.index == index)
            .returning(Question.index)
        )
        if result.scalar_one_or_none() is None:
            return False

        later = await session.execute(
            select(Question)
            .where(Question.group_id == group_id, Question.index > index)
            .order_by(Question.index.asc())
        )
        # Ascending order moves each row into the slot freed by the previous one.
        for question in later.scalars().all():
            question.index -= 1
            await session.flush()
        return True
