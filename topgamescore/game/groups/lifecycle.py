from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from topgamescore.db.repo.groups_repo import GroupsRepo
from topgamescore.game.errors import GroupNotFoundError, InvalidStateError
from topgamescore.game.groups.constants import (
    GROUP_STATUS_DRAFT,
    GROUP_STATUS_FINISHED,
    GROUP_STATUS_OPEN,
)
from topgamescore.game.groups.internal import authorize_host, build_group_snapshot
from topgamescore.game.groups.types import GroupSnapshot, RoundTransitionResult

logger = structlog.get_logger(__name__)


async def start_round(
    session: AsyncSession,
    *,
    group_id: str,
    caller_id: str | None,
    now_utc: datetime,
) -> RoundTransitionResult:
    """Open the quiz: ``draft -> open``.

    ``now_utc`` must come from the database clock; it becomes the round
    start every player's elapsed time falls back to. Starting an already
    open group leaves ``round_started_at`` untouched.
    """
    group = await GroupsRepo.get_by_id_for_update(session, group_id)
    if group is None:
        raise GroupNotFoundError
    claimed = authorize_host(group, caller_id=caller_id)

    if group.status == GROUP_STATUS_FINISHED:
        raise InvalidStateError
    if group.status == GROUP_STATUS_OPEN:
        if claimed:
            group.updated_at = now_utc
        return RoundTransitionResult(snapshot=build_group_snapshot(group), changed=claimed)

    group.status = GROUP_STATUS_OPEN
    group.round_started_at = now_utc
    group.current_question_index = 0
    group.updated_at = now_utc
    logger.info(
        "group_opened",
        group_id=group.id,
        host_claimed=claimed,
        question_count=group.question_count,
    )
    return RoundTransitionResult(snapshot=build_group_snapshot(group), changed=True)


async def finish_round(
    session: AsyncSession,
    *,
    group_id: str,
    caller_id: str | None,
    now_utc: datetime,
) -> RoundTransitionResult:
    group = await GroupsRepo.get_by_id_for_update(session, group_id)
    if group is None:
        raise GroupNotFoundError
    claimed = authorize_host(group, caller_id=caller_id)

    if group.status == GROUP_STATUS_FINISHED:
        if claimed:
            group.updated_at = now_utc
        return RoundTransitionResult(snapshot=build_group_snapshot(group), changed=claimed)

    previous_status = group.status
    group.status = GROUP_STATUS_FINISHED
    group.updated_at = now_utc
    logger.info("group_finished", group_id=group.id, previous_status=previous_status)
    return RoundTransitionResult(snapshot=build_group_snapshot(group), changed=True)


async def claim_host(
    session: AsyncSession,
    *,
    group_id: str,
    caller_id: str | None,
    now_utc: datetime,
) -> GroupSnapshot:
    group = await GroupsRepo.get_by_id_for_update(session, group_id)
    if group is None:
        raise GroupNotFoundError
    if authorize_host(group, caller_id=caller_id):
        group.updated_at = now_utc
        logger.info("group_host_claimed", group_id=group.id)
    return build_group_snapshot(group)


def is_open_for_answers(status: str) -> bool:
    return status == GROUP_STATUS_OPEN


def is_lobby(status: str) -> bool:
    return status in {GROUP_STATUS_DRAFT, GROUP_STATUS_OPEN}
