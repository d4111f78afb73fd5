from topgamescore.db.models.answers import Answer
from topgamescore.db.models.base import Base
from topgamescore.db.models.groups import Group
from topgamescore.db.models.host_accounts import HostAccount
from topgamescore.db.models.players import Player
from topgamescore.db.models.questions import Question

__all__ = [
    "Answer",
    "Base",
    "Group",
    "HostAccount",
    "Player",
    "Question",
]
