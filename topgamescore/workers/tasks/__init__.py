from topgamescore.workers.tasks.group_retention import run_group_retention
from topgamescore.workers.tasks.score_reconciliation import run_score_reconciliation

__all__ = [
    "run_group_retention",
    "run_score_reconciliation",
]
