from __future__ import annotations

from collections.abc import Iterable, Mapping

from topgamescore.game.leaderboard.types import LeaderboardEntry, PlayerStanding


def _sort_key(standing: PlayerStanding) -> tuple[int, str, str]:
    return (-standing.total_score, standing.name, standing.player_id)


def rank_players(standings: Iterable[PlayerStanding]) -> list[LeaderboardEntry]:
    """Order by total descending, then name, then player id; ranks start at 1."""
    ordered = sorted(standings, key=_sort_key)
    return [
        LeaderboardEntry(
            rank=position,
            player_id=item.player_id,
            name=item.name,
            handle=item.handle,
            total_score=item.total_score,
        )
        for position, item in enumerate(ordered, start=1)
    ]


def standings_from_answer_log(
    players: Iterable[PlayerStanding],
    score_by_player: Mapping[str, int],
) -> list[PlayerStanding]:
    # Players without a logged answer stay on the board with zero.
    return [
        PlayerStanding(
            player_id=item.player_id,
            name=item.name,
            handle=item.handle,
            total_score=int(score_by_player.get(item.player_id, 0)),
        )
        for item in players
    ]
