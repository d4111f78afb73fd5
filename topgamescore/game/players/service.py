from topgamescore.game.players.join import join_group
from topgamescore.game.players.progress import begin_question, get_player_progress

__all__ = [
    "begin_question",
    "get_player_progress",
    "join_group",
]
