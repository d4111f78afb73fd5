from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from topgamescore.core.config import get_settings
from topgamescore.db.models.groups import Group
from topgamescore.db.models.questions import Question
from topgamescore.db.repo.groups_repo import GroupsRepo
from topgamescore.db.repo.questions_repo import QuestionsRepo
from topgamescore.economy.plans.rules import question_limit_for_plan
from topgamescore.game.errors import (
    GroupNotFoundError,
    InvalidStateError,
    PlanLimitExceededError,
    QuestionNotFoundError,
)
from topgamescore.game.groups.constants import GROUP_STATUS_DRAFT, GROUP_STATUS_FINISHED
from topgamescore.game.groups.internal import (
    authorize_host,
    build_question_view,
    normalize_new_question,
)
from topgamescore.game.groups.types import NewQuestion, QuestionView

logger = structlog.get_logger(__name__)


async def append_question(
    session: AsyncSession,
    *,
    group: Group,
    question: NewQuestion,
    now_utc: datetime,
) -> Question:
    limit = question_limit_for_plan(
        plan=group.plan,
        free_limit=get_settings().free_question_limit,
    )
    current_total = await QuestionsRepo.count_for_group(session, group_id=group.id)
    if limit is not None and current_total >= limit:
        raise PlanLimitExceededError(limit)

    created = await QuestionsRepo.create(
        session,
        question=Question(
            group_id=group.id,
            index=current_total,
            text=question.text,
            options=list(question.options),
            correct_index=question.correct_index,
        ),
    )
    group.question_count = current_total + 1
    group.updated_at = now_utc
    return created


async def add_question(
    session: AsyncSession,
    *,
    group_id: str,
    caller_id: str | None,
    text: str,
    options: list[str] | tuple[str, ...],
    correct_index: int,
    now_utc: datetime,
) -> QuestionView:
    group = await GroupsRepo.get_by_id_for_update(session, group_id)
    if group is None:
        raise GroupNotFoundError
    authorize_host(group, caller_id=caller_id)
    # Questions are frozen once the quiz has been opened.
    if group.status != GROUP_STATUS_DRAFT:
        raise InvalidStateError

    new_question = normalize_new_question(text=text, options=options, correct_index=correct_index)
    created = await append_question(session, group=group, question=new_question, now_utc=now_utc)
    logger.info("question_added", group_id=group.id, index=created.index)
    return build_question_view(created, reveal_correct=True)


async def remove_question(
    session: AsyncSession,
    *,
    group_id: str,
    caller_id: str | None,
    index: int,
    now_utc: datetime,
) -> int:
    group = await GroupsRepo.get_by_id_for_update(session, group_id)
    if group is None:
        raise GroupNotFoundError
    authorize_host(group, caller_id=caller_id)
    if group.status != GROUP_STATUS_DRAFT:
        raise InvalidStateError

    removed = await QuestionsRepo.delete_and_reindex(session, group_id=group.id, index=index)
    if not removed:
        raise QuestionNotFoundError
    group.question_count = await QuestionsRepo.count_for_group(session, group_id=group.id)
    group.updated_at = now_utc
    logger.info("question_removed", group_id=group.id, index=index)
    return group.question_count


async def list_questions(
    session: AsyncSession,
    *,
    group_id: str,
    caller_id: str | None = None,
) -> list[QuestionView]:
    group = await GroupsRepo.get_by_id(session, group_id)
    if group is None:
        raise GroupNotFoundError
    reveal_correct = group.status == GROUP_STATUS_FINISHED or (
        caller_id is not None and group.host_id == caller_id
    )
    questions = await QuestionsRepo.list_for_group(session, group_id=group.id)
    return [build_question_view(item, reveal_correct=reveal_correct) for item in questions]
