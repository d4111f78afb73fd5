from __future__ import annotations

from collections.abc import Awaitable, Callable

from topgamescore.db.repo.groups_repo import GroupsRepo
from topgamescore.db.unit_of_work import transaction
from topgamescore.game.groups.queries import get_group
from topgamescore.game.groups.types import GroupSnapshot
from topgamescore.game.leaderboard.service import get_leaderboard
from topgamescore.game.leaderboard.types import LeaderboardEntry
from topgamescore.game.players.service import begin_question, get_player_progress, join_group
from topgamescore.game.players.types import JoinResult, PlayerProgress, QuestionRound
from topgamescore.game.scoring.service import submit_answer
from topgamescore.game.scoring.types import SubmitAnswerResult
from topgamescore.realtime.change_feed import ChangeFeed, Subscription, get_change_feed
from topgamescore.realtime.events import (
    GROUP_EVENT_ANSWER_RECORDED,
    GROUP_EVENT_PLAYER_JOINED,
    GroupEvent,
)
from topgamescore.realtime.publisher import notify_group


class DatabaseQuizBackend:
    """Runs a player session in-process against PostgreSQL and the Redis feed."""

    def __init__(self, change_feed: ChangeFeed | None = None) -> None:
        self._change_feed = change_feed

    @property
    def change_feed(self) -> ChangeFeed:
        if self._change_feed is None:
            self._change_feed = get_change_feed()
        return self._change_feed

    async def get_group(self, group_id: str) -> GroupSnapshot:
        async with transaction() as session:
            return await get_group(session, group_id=group_id)

    async def join_group(
        self,
        *,
        group_id: str,
        player_id: str,
        name: str,
        handle: str,
    ) -> JoinResult:
        async with transaction() as session:
            now_utc = await GroupsRepo.server_now(session)
            result = await join_group(
                session,
                group_id=group_id,
                player_id=player_id,
                name=name,
                handle=handle,
                now_utc=now_utc,
            )
        if result.created:
            await notify_group(
                group_id,
                GROUP_EVENT_PLAYER_JOINED,
                feed=self.change_feed,
                player_id=player_id,
            )
        return result

    async def get_progress(self, *, group_id: str, player_id: str) -> PlayerProgress:
        async with transaction() as session:
            return await get_player_progress(session, group_id=group_id, player_id=player_id)

    async def begin_question(self, *, group_id: str, player_id: str, q_index: int) -> QuestionRound:
        async with transaction() as session:
            now_utc = await GroupsRepo.server_now(session)
            return await begin_question(
                session,
                group_id=group_id,
                player_id=player_id,
                q_index=q_index,
                now_utc=now_utc,
            )

    async def submit_answer(
        self,
        *,
        group_id: str,
        player_id: str,
        q_index: int,
        chosen_index: int | None,
    ) -> SubmitAnswerResult:
        async with transaction() as session:
            now_utc = await GroupsRepo.server_now(session)
            result = await submit_answer(
                session,
                group_id=group_id,
                player_id=player_id,
                q_index=q_index,
                chosen_index=chosen_index,
                now_utc=now_utc,
            )
        if not result.duplicate:
            await notify_group(
                group_id,
                GROUP_EVENT_ANSWER_RECORDED,
                feed=self.change_feed,
                player_id=player_id,
                q_index=q_index,
            )
        return result

    async def get_leaderboard(self, group_id: str) -> list[LeaderboardEntry]:
        async with transaction() as session:
            return await get_leaderboard(session, group_id=group_id)

    async def watch_group(
        self,
        group_id: str,
        handler: Callable[[GroupEvent], Awaitable[None]],
    ) -> Subscription:
        return await self.change_feed.subscribe(group_id, handler)
