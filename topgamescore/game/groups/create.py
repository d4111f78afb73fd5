from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from topgamescore.core.config import get_settings
from topgamescore.db.models.groups import Group
from topgamescore.db.repo.groups_repo import GroupsRepo
from topgamescore.economy.plans.rules import resolve_group_expiry, resolve_group_plan
from topgamescore.economy.plans.service import PlanService
from topgamescore.game.errors import ForbiddenError, ValidationError
from topgamescore.game.groups.constants import (
    GROUP_DEFAULT_LOCALE,
    GROUP_DEFAULT_TITLE,
    GROUP_STATUS_DRAFT,
    GROUP_TITLE_MAX_LENGTH,
    NO_QUESTION_INDEX,
)
from topgamescore.game.groups.internal import (
    build_group_snapshot,
    generate_group_code,
    normalize_new_question,
    resolve_max_time_sec,
)
from topgamescore.game.groups.questions import append_question
from topgamescore.game.groups.types import GroupSnapshot, NewQuestion

logger = structlog.get_logger(__name__)


def _resolve_title(title: str | None) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        return GROUP_DEFAULT_TITLE
    if len(cleaned) > GROUP_TITLE_MAX_LENGTH:
        raise ValidationError("title is too long")
    return cleaned


async def create_group(
    session: AsyncSession,
    *,
    host_id: str | None,
    now_utc: datetime,
    title: str | None = None,
    max_time_sec: int | None = None,
    locale: str | None = None,
    questions: Sequence[NewQuestion] = (),
) -> GroupSnapshot:
    if not host_id:
        raise ForbiddenError

    resolved_max_time = resolve_max_time_sec(max_time_sec)
    normalized_questions = [
        normalize_new_question(
            text=item.text,
            options=item.options,
            correct_index=item.correct_index,
        )
        for item in questions
    ]
    host_is_pro = await PlanService.is_host_pro(session, host_id=host_id)
    plan = resolve_group_plan(host_is_pro=host_is_pro)

    group = await GroupsRepo.create(
        session,
        group=Group(
            id=await generate_group_code(session),
            host_id=host_id,
            title=_resolve_title(title),
            locale=(locale or GROUP_DEFAULT_LOCALE).strip()[:8] or GROUP_DEFAULT_LOCALE,
            status=GROUP_STATUS_DRAFT,
            current_question_index=NO_QUESTION_INDEX,
            round_started_at=None,
            max_time_sec=resolved_max_time,
            plan=plan,
            expires_at=resolve_group_expiry(
                plan=plan,
                reference_utc=now_utc,
                ttl_days=get_settings().free_group_ttl_days,
            ),
            question_count=0,
            created_at=now_utc,
            updated_at=now_utc,
        ),
    )
    for question in normalized_questions:
        await append_question(session, group=group, question=question, now_utc=now_utc)

    logger.info(
        "group_created",
        group_id=group.id,
        plan=plan,
        max_time_sec=resolved_max_time,
        question_count=group.question_count,
    )
    return build_group_snapshot(group)
