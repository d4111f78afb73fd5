from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from topgamescore.db.models.answers import Answer
from topgamescore.db.models.groups import Group
from topgamescore.db.models.players import Player
from topgamescore.db.repo.answers_repo import AnswersRepo
from topgamescore.db.repo.groups_repo import GroupsRepo
from topgamescore.db.repo.players_repo import PlayersRepo
from topgamescore.db.repo.questions_repo import QuestionsRepo
from topgamescore.game.errors import (
    GroupNotFoundError,
    GroupNotOpenError,
    InvalidAnswerOptionError,
    PlayerNotFoundError,
    QuestionNotFoundError,
    StorageFailureError,
    ValidationError,
)
from topgamescore.game.groups.lifecycle import is_open_for_answers
from topgamescore.game.scoring.rules import compute_elapsed_ms, compute_score, is_correct_choice
from topgamescore.game.scoring.types import SubmitAnswerResult

logger = structlog.get_logger(__name__)


def _build_duplicate_result(answer: Answer) -> SubmitAnswerResult:
    return SubmitAnswerResult(
        group_id=answer.group_id,
        player_id=answer.player_id,
        q_index=answer.q_index,
        chosen_index=answer.chosen_index,
        correct=answer.correct,
        score_awarded=answer.score_awarded,
        elapsed_ms=answer.elapsed_ms,
        duplicate=True,
    )


def resolve_round_reference(*, group: Group, player: Player, q_index: int) -> datetime | None:
    if player.current_question_index == q_index and player.question_started_at is not None:
        return player.question_started_at
    return group.round_started_at


async def submit_answer(
    session: AsyncSession,
    *,
    group_id: str,
    player_id: str,
    q_index: int,
    chosen_index: int | None,
    now_utc: datetime,
) -> SubmitAnswerResult:
    """Score one answer and apply it to the player's total exactly once.

    ``chosen_index=None`` records a timeout. A repeated submission for the
    same ``(group_id, player_id, q_index)`` returns the stored result with
    ``duplicate=True`` and changes nothing. ``now_utc`` must be the
    database server instant.
    """
    if q_index < 0:
        raise ValidationError("q_index must be non-negative")
    if chosen_index is not None and chosen_index < 0:
        raise InvalidAnswerOptionError

    group = await GroupsRepo.get_by_id(session, group_id)
    if group is None:
        raise GroupNotFoundError

    existing = await AnswersRepo.get(session, group_id=group.id, player_id=player_id, q_index=q_index)
    if existing is not None:
        logger.info("answer_duplicate", group_id=group.id, player_id=player_id, q_index=q_index)
        return _build_duplicate_result(existing)

    if not is_open_for_answers(group.status):
        raise GroupNotOpenError

    player = await PlayersRepo.get(session, group_id=group.id, player_id=player_id)
    if player is None:
        raise PlayerNotFoundError

    question = await QuestionsRepo.get_by_index(session, group_id=group.id, index=q_index)
    if question is None:
        raise QuestionNotFoundError
    if chosen_index is not None and chosen_index >= len(question.options):
        raise InvalidAnswerOptionError

    correct = is_correct_choice(chosen_index=chosen_index, correct_index=question.correct_index)
    elapsed_ms: int | None = None
    if chosen_index is not None:
        elapsed_ms = compute_elapsed_ms(
            now_utc=now_utc,
            round_started_at=resolve_round_reference(group=group, player=player, q_index=q_index),
        )
    score_awarded = compute_score(
        correct=correct,
        elapsed_ms=elapsed_ms,
        max_time_sec=group.max_time_sec,
    )

    inserted = await AnswersRepo.create_once(
        session,
        group_id=group.id,
        player_id=player_id,
        q_index=q_index,
        chosen_index=chosen_index,
        correct=correct,
        elapsed_ms=elapsed_ms,
        score_awarded=score_awarded,
        created_at=now_utc,
    )
    if not inserted:
        # A concurrent submission won the key; report what it stored.
        winner = await AnswersRepo.get(session, group_id=group.id, player_id=player_id, q_index=q_index)
        if winner is None:
            raise StorageFailureError("answer key conflict without a stored answer")
        logger.info("answer_duplicate_race", group_id=group.id, player_id=player_id, q_index=q_index)
        return _build_duplicate_result(winner)

    # Same transaction as the insert: either both land or neither does.
    total_score = await PlayersRepo.increment_total_score(
        session,
        group_id=group.id,
        player_id=player_id,
        delta=score_awarded,
    )
    logger.info(
        "answer_recorded",
        group_id=group.id,
        player_id=player_id,
        q_index=q_index,
        correct=correct,
        timed_out=chosen_index is None,
        elapsed_ms=elapsed_ms,
        score_awarded=score_awarded,
    )
    return SubmitAnswerResult(
        group_id=group.id,
        player_id=player_id,
        q_index=q_index,
        chosen_index=chosen_index,
        correct=correct,
        score_awarded=score_awarded,
        elapsed_ms=elapsed_ms,
        duplicate=False,
        total_score=total_score,
    )
