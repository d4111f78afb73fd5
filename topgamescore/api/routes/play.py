from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from topgamescore.api.deps import get_principal_id
from topgamescore.api.errors import to_http_exception
from topgamescore.core.logging import bind_group_context
from topgamescore.db.repo.groups_repo import GroupsRepo
from topgamescore.db.unit_of_work import transaction
from topgamescore.game.errors import ForbiddenError, GameError
from topgamescore.game.leaderboard.service import LEADERBOARD_SOURCE_PLAYERS, get_leaderboard
from topgamescore.game.players.service import begin_question, get_player_progress, join_group
from topgamescore.game.scoring.service import submit_answer
from topgamescore.realtime.events import GROUP_EVENT_ANSWER_RECORDED, GROUP_EVENT_PLAYER_JOINED
from topgamescore.realtime.publisher import notify_group

from .models import (
    AnswerSubmitRequest,
    AnswerSubmitResponse,
    JoinRequest,
    JoinResponse,
    LeaderboardResponse,
    ProgressResponse,
    QuestionRoundResponse,
)
from .serializers import (
    answer_as_response,
    leaderboard_entry_as_response,
    player_as_response,
    progress_as_response,
    round_as_response,
)

router = APIRouter(tags=["play"])


def _require_player(principal_id: str | None) -> str:
    if not principal_id:
        raise to_http_exception(ForbiddenError())
    return principal_id


@router.post("/groups/{group_id}/join", response_model=JoinResponse)
async def join_group_route(
    group_id: str,
    payload: JoinRequest,
    principal_id: str | None = Depends(get_principal_id),
) -> JoinResponse:
    player_id = _require_player(principal_id)
    bind_group_context(group_id=group_id, principal_id=player_id)
    try:
        async with transaction() as session:
            now_utc = await GroupsRepo.server_now(session)
            result = await join_group(
                session,
                group_id=group_id,
                player_id=player_id,
                name=payload.name,
                handle=payload.handle,
                now_utc=now_utc,
            )
    except GameError as exc:
        raise to_http_exception(exc) from exc

    if result.created:
        await notify_group(group_id, GROUP_EVENT_PLAYER_JOINED, player_id=player_id)
    return JoinResponse(
        player=player_as_response(result.player),
        group_status=result.group_status,
        created=result.created,
    )


@router.get("/groups/{group_id}/progress", response_model=ProgressResponse)
async def get_progress_route(
    group_id: str,
    principal_id: str | None = Depends(get_principal_id),
) -> ProgressResponse:
    player_id = _require_player(principal_id)
    try:
        async with transaction() as session:
            progress = await get_player_progress(session, group_id=group_id, player_id=player_id)
    except GameError as exc:
        raise to_http_exception(exc) from exc
    return progress_as_response(progress)


@router.post("/groups/{group_id}/questions/{q_index}/begin", response_model=QuestionRoundResponse)
async def begin_question_route(
    group_id: str,
    q_index: int,
    principal_id: str | None = Depends(get_principal_id),
) -> QuestionRoundResponse:
    player_id = _require_player(principal_id)
    bind_group_context(group_id=group_id, principal_id=player_id)
    try:
        async with transaction() as session:
            now_utc = await GroupsRepo.server_now(session)
            question_round = await begin_question(
                session,
                group_id=group_id,
                player_id=player_id,
                q_index=q_index,
                now_utc=now_utc,
            )
    except GameError as exc:
        raise to_http_exception(exc) from exc
    return round_as_response(question_round)


@router.post("/groups/{group_id}/answers", response_model=AnswerSubmitResponse)
async def submit_answer_route(
    group_id: str,
    payload: AnswerSubmitRequest,
    principal_id: str | None = Depends(get_principal_id),
) -> AnswerSubmitResponse:
    player_id = _require_player(principal_id)
    bind_group_context(group_id=group_id, principal_id=player_id)
    try:
        async with transaction() as session:
            now_utc = await GroupsRepo.server_now(session)
            result = await submit_answer(
                session,
                group_id=group_id,
                player_id=player_id,
                q_index=payload.q_index,
                chosen_index=payload.chosen_index,
                now_utc=now_utc,
            )
    except GameError as exc:
        raise to_http_exception(exc) from exc

    if not result.duplicate:
        await notify_group(
            group_id,
            GROUP_EVENT_ANSWER_RECORDED,
            player_id=player_id,
            q_index=result.q_index,
        )
    return answer_as_response(result)


@router.get("/groups/{group_id}/leaderboard", response_model=LeaderboardResponse)
async def leaderboard_route(
    group_id: str,
    source: str = Query(default=LEADERBOARD_SOURCE_PLAYERS),
) -> LeaderboardResponse:
    try:
        async with transaction() as session:
            entries = await get_leaderboard(session, group_id=group_id, source=source)
    except GameError as exc:
        raise to_http_exception(exc) from exc
    return LeaderboardResponse(
        group_id=group_id,
        source=source,
        items=[leaderboard_entry_as_response(entry) for entry in entries],
    )
