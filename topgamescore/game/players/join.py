from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from topgamescore.db.repo.groups_repo import GroupsRepo
from topgamescore.db.repo.players_repo import PlayersRepo
from topgamescore.economy.plans.rules import is_group_expired
from topgamescore.game.errors import (
    ForbiddenError,
    GroupNotFoundError,
    GroupNotOpenForJoinError,
    PlayerNotFoundError,
)
from topgamescore.game.groups.lifecycle import is_lobby
from topgamescore.game.players.internal import build_player_snapshot
from topgamescore.game.players.types import JoinResult
from topgamescore.game.players.validation import normalize_player_handle, normalize_player_name

logger = structlog.get_logger(__name__)


async def join_group(
    session: AsyncSession,
    *,
    group_id: str,
    player_id: str | None,
    name: str | None,
    handle: str | None,
    now_utc: datetime,
) -> JoinResult:
    """Register the caller in a group, or refresh their display fields.

    Re-joining never resets ``total_score`` or ``joined_at``.
    """
    if not player_id:
        raise ForbiddenError
    cleaned_name = normalize_player_name(name)
    cleaned_handle = normalize_player_handle(handle)

    group = await GroupsRepo.get_by_id(session, group_id)
    if group is None:
        raise GroupNotFoundError
    if not is_lobby(group.status):
        raise GroupNotOpenForJoinError
    if is_group_expired(plan=group.plan, expires_at=group.expires_at, now_utc=now_utc):
        raise GroupNotOpenForJoinError

    created = await PlayersRepo.create_once(
        session,
        group_id=group.id,
        player_id=player_id,
        name=cleaned_name,
        handle=cleaned_handle,
        joined_at=now_utc,
    )
    if not created:
        await PlayersRepo.update_display(
            session,
            group_id=group.id,
            player_id=player_id,
            name=cleaned_name,
            handle=cleaned_handle,
        )

    player = await PlayersRepo.get_for_update(session, group_id=group.id, player_id=player_id)
    if player is None:
        raise PlayerNotFoundError

    logger.info(
        "player_joined" if created else "player_rejoined",
        group_id=group.id,
        player_id=player_id,
        group_status=group.status,
    )
    return JoinResult(
        player=build_player_snapshot(player),
        group_status=group.status,
        created=created,
    )
