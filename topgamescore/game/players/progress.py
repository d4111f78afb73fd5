from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from topgamescore.db.repo.answers_repo import AnswersRepo
from topgamescore.db.repo.groups_repo import GroupsRepo
from topgamescore.db.repo.players_repo import PlayersRepo
from topgamescore.db.repo.questions_repo import QuestionsRepo
from topgamescore.game.errors import (
    GroupNotFoundError,
    GroupNotOpenError,
    InvalidStateError,
    PlayerNotFoundError,
    QuestionNotFoundError,
    ValidationError,
)
from topgamescore.game.groups.internal import build_question_view
from topgamescore.game.groups.lifecycle import is_open_for_answers
from topgamescore.game.players.internal import resolve_next_question_index
from topgamescore.game.players.types import PlayerProgress, QuestionRound
from topgamescore.game.scoring.rules import compute_elapsed_ms

logger = structlog.get_logger(__name__)


async def get_player_progress(
    session: AsyncSession,
    *,
    group_id: str,
    player_id: str,
) -> PlayerProgress:
    group = await GroupsRepo.get_by_id(session, group_id)
    if group is None:
        raise GroupNotFoundError
    player = await PlayersRepo.get(session, group_id=group.id, player_id=player_id)
    if player is None:
        raise PlayerNotFoundError

    question_count = await QuestionsRepo.count_for_group(session, group_id=group.id)
    answered = await AnswersRepo.list_answered_indexes(
        session,
        group_id=group.id,
        player_id=player_id,
    )
    return PlayerProgress(
        group_id=group.id,
        player_id=player_id,
        group_status=group.status,
        question_count=question_count,
        answered_indexes=tuple(answered),
        next_question_index=resolve_next_question_index(
            question_count=question_count,
            answered_indexes=set(answered),
        ),
        total_score=player.total_score,
    )


async def begin_question(
    session: AsyncSession,
    *,
    group_id: str,
    player_id: str,
    q_index: int,
    now_utc: datetime,
) -> QuestionRound:
    """Stamp the server-side start of ``q_index`` for one player.

    Calling it again for the player's current question keeps the first
    stamp, so a reconnect does not restart the clock. Moving back to an
    earlier question is rejected.
    """
    if q_index < 0:
        raise ValidationError("q_index must be non-negative")

    group = await GroupsRepo.get_by_id(session, group_id)
    if group is None:
        raise GroupNotFoundError
    if not is_open_for_answers(group.status):
        raise GroupNotOpenError

    player = await PlayersRepo.get_for_update(session, group_id=group.id, player_id=player_id)
    if player is None:
        raise PlayerNotFoundError
    question = await QuestionsRepo.get_by_index(session, group_id=group.id, index=q_index)
    if question is None:
        raise QuestionNotFoundError

    answered = await AnswersRepo.get(session, group_id=group.id, player_id=player_id, q_index=q_index)
    if q_index < player.current_question_index and answered is None:
        raise InvalidStateError

    if q_index == player.current_question_index and player.question_started_at is not None:
        started_at = player.question_started_at
    elif answered is not None:
        started_at = group.round_started_at or answered.created_at
    else:
        started_at = now_utc
        await PlayersRepo.set_current_question(
            session,
            group_id=group.id,
            player_id=player_id,
            q_index=q_index,
            started_at=started_at,
        )
        logger.info("question_started", group_id=group.id, player_id=player_id, q_index=q_index)

    return QuestionRound(
        question=build_question_view(question, reveal_correct=False),
        max_time_sec=group.max_time_sec,
        started_at=started_at,
        elapsed_ms=compute_elapsed_ms(now_utc=now_utc, round_started_at=started_at),
        already_answered=answered is not None,
    )
