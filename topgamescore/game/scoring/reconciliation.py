from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from topgamescore.db.repo.answers_repo import AnswersRepo
from topgamescore.db.repo.players_repo import PlayersRepo
from topgamescore.game.scoring.types import ReconciliationResult

logger = structlog.get_logger(__name__)


async def reconcile_group_totals(session: AsyncSession, *, group_id: str) -> ReconciliationResult:
    """Bring cached player totals in line with the answer log.

    Totals lower than the sum of awarded scores are raised. Totals that are
    higher are only reported; points are never taken away here.

    Player rows are read before the answer log. A submit committed between
    the two reads then looks under-counted, and the conditional raise turns
    it into a no-op.
    """
    players = await PlayersRepo.list_for_group(session, group_id=group_id)
    log_totals = await AnswersRepo.sum_scores_by_player(session, group_id=group_id)

    repaired = 0
    repaired_points = 0
    over_counted: list[str] = []
    for player in players:
        expected = log_totals.get(player.player_id, 0)
        if player.total_score == expected:
            continue
        if player.total_score > expected:
            over_counted.append(player.player_id)
            continue
        updated = await PlayersRepo.raise_total_score_to(
            session,
            group_id=group_id,
            player_id=player.player_id,
            total_score=expected,
        )
        if updated:
            repaired += 1
            repaired_points += expected - player.total_score

    if repaired or over_counted:
        logger.warning(
            "score_totals_reconciled",
            group_id=group_id,
            players_repaired=repaired,
            repaired_points=repaired_points,
            over_counted=len(over_counted),
        )
    return ReconciliationResult(
        group_id=group_id,
        players_checked=len(players),
        players_repaired=repaired,
        repaired_points=repaired_points,
        over_counted_player_ids=tuple(over_counted),
    )
