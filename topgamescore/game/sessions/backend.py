from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Protocol

from topgamescore.game.groups.types import GroupSnapshot
from topgamescore.game.leaderboard.types import LeaderboardEntry
from topgamescore.game.players.types import JoinResult, PlayerProgress, QuestionRound
from topgamescore.game.scoring.types import SubmitAnswerResult
from topgamescore.realtime.events import GroupEvent


class GroupWatch(Protocol):
    async def close(self) -> None: ...


class QuizBackend(Protocol):
    async def get_group(self, group_id: str) -> GroupSnapshot: ...

    async def join_group(
        self,
        *,
        group_id: str,
        player_id: str,
        name: str,
        handle: str,
    ) -> JoinResult: ...

    async def get_progress(self, *, group_id: str, player_id: str) -> PlayerProgress: ...

    async def begin_question(self, *, group_id: str, player_id: str, q_index: int) -> QuestionRound: ...

    async def submit_answer(
        self,
        *,
        group_id: str,
        player_id: str,
        q_index: int,
        chosen_index: int | None,
    ) -> SubmitAnswerResult: ...

    async def get_leaderboard(self, group_id: str) -> list[LeaderboardEntry]: ...

    async def watch_group(
        self,
        group_id: str,
        handler: Callable[[GroupEvent], Awaitable[None]],
    ) -> GroupWatch: ...
