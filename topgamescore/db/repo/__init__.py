from topgamescore.db.repo.answers_repo import AnswersRepo
from topgamescore.db.repo.groups_repo import GroupsRepo
from topgamescore.db.repo.host_accounts_repo import HostAccountsRepo
from topgamescore.db.repo.players_repo import PlayersRepo
from topgamescore.db.repo.questions_repo import QuestionsRepo

__all__ = [
    "AnswersRepo",
    "GroupsRepo",
    "HostAccountsRepo",
    "PlayersRepo",
    "QuestionsRepo",
]
