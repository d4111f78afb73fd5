from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from topgamescore.db.repo.groups_repo import GroupsRepo
from topgamescore.game.errors import GroupNotFoundError
from topgamescore.game.groups.internal import build_group_snapshot
from topgamescore.game.groups.types import GroupSnapshot


async def get_group(session: AsyncSession, *, group_id: str) -> GroupSnapshot:
    group = await GroupsRepo.get_by_id(session, group_id)
    if group is None:
        raise GroupNotFoundError
    return build_group_snapshot(group)
