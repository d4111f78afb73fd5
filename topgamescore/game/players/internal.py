from __future__ import annotations

from topgamescore.db.models.players import Player
from topgamescore.game.players.types import PlayerSnapshot


def build_player_snapshot(player: Player) -> PlayerSnapshot:
    return PlayerSnapshot(
        group_id=player.group_id,
        player_id=player.player_id,
        name=player.name,
        handle=player.handle,
        total_score=player.total_score,
        joined_at=player.joined_at,
        current_question_index=player.current_question_index,
    )


def resolve_next_question_index(*, question_count: int, answered_indexes: set[int]) -> int | None:
    for index in range(question_count):
        if index not in answered_indexes:
            return index
    return None
