from __future__ import annotations

from topgamescore.game.groups.types import GroupSnapshot, QuestionView
from topgamescore.game.leaderboard.types import LeaderboardEntry
from topgamescore.game.players.types import PlayerProgress, PlayerSnapshot, QuestionRound
from topgamescore.game.scoring.types import SubmitAnswerResult

from .models import (
    AnswerSubmitResponse,
    GroupResponse,
    LeaderboardEntryResponse,
    PlayerResponse,
    ProgressResponse,
    QuestionResponse,
    QuestionRoundResponse,
)


def group_as_response(snapshot: GroupSnapshot) -> GroupResponse:
    return GroupResponse(
        group_id=snapshot.group_id,
        host_id=snapshot.host_id,
        title=snapshot.title,
        locale=snapshot.locale,
        status=snapshot.status,
        current_question_index=snapshot.current_question_index,
        round_started_at=snapshot.round_started_at,
        max_time_sec=snapshot.max_time_sec,
        plan=snapshot.plan,
        expires_at=snapshot.expires_at,
        question_count=snapshot.question_count,
        created_at=snapshot.created_at,
    )


def question_as_response(view: QuestionView) -> QuestionResponse:
    return QuestionResponse(
        index=view.index,
        text=view.text,
        options=list(view.options),
        correct_index=view.correct_index,
    )


def player_as_response(player: PlayerSnapshot) -> PlayerResponse:
    return PlayerResponse(
        player_id=player.player_id,
        name=player.name,
        handle=player.handle,
        total_score=player.total_score,
        joined_at=player.joined_at,
    )


def progress_as_response(progress: PlayerProgress) -> ProgressResponse:
    return ProgressResponse(
        group_status=progress.group_status,
        question_count=progress.question_count,
        answered_indexes=list(progress.answered_indexes),
        next_question_index=progress.next_question_index,
        completed=progress.completed,
        total_score=progress.total_score,
    )


def round_as_response(question_round: QuestionRound) -> QuestionRoundResponse:
    return QuestionRoundResponse(
        question=question_as_response(question_round.question),
        max_time_sec=question_round.max_time_sec,
        started_at=question_round.started_at,
        elapsed_ms=question_round.elapsed_ms,
        already_answered=question_round.already_answered,
    )


def answer_as_response(result: SubmitAnswerResult) -> AnswerSubmitResponse:
    return AnswerSubmitResponse(
        q_index=result.q_index,
        chosen_index=result.chosen_index,
        correct=result.correct,
        score_awarded=result.score_awarded,
        elapsed_ms=result.elapsed_ms,
        duplicate=result.duplicate,
        total_score=result.total_score,
    )


def leaderboard_entry_as_response(entry: LeaderboardEntry) -> LeaderboardEntryResponse:
    return LeaderboardEntryResponse(
        rank=entry.rank,
        player_id=entry.player_id,
        name=entry.name,
        handle=entry.handle,
        total_score=entry.total_score,
    )
