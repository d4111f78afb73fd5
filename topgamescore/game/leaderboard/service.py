from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from topgamescore.db.repo.answers_repo import AnswersRepo
from topgamescore.db.repo.groups_repo import GroupsRepo
from topgamescore.db.repo.players_repo import PlayersRepo
from topgamescore.game.errors import GroupNotFoundError, ValidationError
from topgamescore.game.leaderboard.ranking import rank_players, standings_from_answer_log
from topgamescore.game.leaderboard.types import LeaderboardEntry, PlayerStanding

LEADERBOARD_SOURCE_PLAYERS = "players"
LEADERBOARD_SOURCE_ANSWERS = "answers"
LEADERBOARD_SOURCES = (LEADERBOARD_SOURCE_PLAYERS, LEADERBOARD_SOURCE_ANSWERS)


async def get_leaderboard(
    session: AsyncSession,
    *,
    group_id: str,
    source: str = LEADERBOARD_SOURCE_PLAYERS,
) -> list[LeaderboardEntry]:
    if source not in LEADERBOARD_SOURCES:
        raise ValidationError(f"unknown leaderboard source: {source}")

    group = await GroupsRepo.get_by_id(session, group_id)
    if group is None:
        raise GroupNotFoundError

    players = await PlayersRepo.list_for_group(session, group_id=group.id)
    standings = [
        PlayerStanding(
            player_id=player.player_id,
            name=player.name,
            handle=player.handle,
            total_score=player.total_score,
        )
        for player in players
    ]
    if source == LEADERBOARD_SOURCE_ANSWERS:
        score_by_player = await AnswersRepo.sum_scores_by_player(session, group_id=group.id)
        standings = standings_from_answer_log(standings, score_by_player)
    return rank_players(standings)
