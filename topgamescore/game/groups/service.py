from topgamescore.game.groups.create import create_group
from topgamescore.game.groups.lifecycle import claim_host, finish_round, start_round
from topgamescore.game.groups.queries import get_group
from topgamescore.game.groups.questions import add_question, list_questions, remove_question

__all__ = [
    "add_question",
    "claim_host",
    "create_group",
    "finish_round",
    "get_group",
    "list_questions",
    "remove_question",
    "start_round",
]
