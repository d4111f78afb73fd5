from __future__ import annotations

from fastapi import APIRouter, Depends

from topgamescore.api.deps import get_principal_id
from topgamescore.api.errors import to_http_exception
from topgamescore.core.logging import bind_group_context
from topgamescore.db.repo.groups_repo import GroupsRepo
from topgamescore.db.unit_of_work import transaction
from topgamescore.game.errors import GameError
from topgamescore.game.groups.service import (
    add_question,
    claim_host,
    create_group,
    finish_round,
    get_group,
    list_questions,
    remove_question,
    start_round,
)
from topgamescore.game.groups.types import NewQuestion
from topgamescore.realtime.events import GROUP_EVENT_GROUP_UPDATED, GROUP_EVENT_QUESTIONS_CHANGED
from topgamescore.realtime.publisher import notify_group

from .models import (
    GroupCreateRequest,
    GroupResponse,
    QuestionCreateRequest,
    QuestionListResponse,
    QuestionRemovedResponse,
    QuestionResponse,
    RoundTransitionResponse,
)
from .serializers import group_as_response, question_as_response

router = APIRouter(tags=["groups"])


@router.post("/groups", response_model=GroupResponse, status_code=201)
async def create_group_route(
    payload: GroupCreateRequest,
    principal_id: str | None = Depends(get_principal_id),
) -> GroupResponse:
    try:
        async with transaction() as session:
            now_utc = await GroupsRepo.server_now(session)
            snapshot = await create_group(
                session,
                host_id=principal_id,
                now_utc=now_utc,
                title=payload.title,
                max_time_sec=payload.max_time_sec,
                locale=payload.locale,
                questions=[
                    NewQuestion(
                        text=item.text,
                        options=tuple(item.options),
                        correct_index=item.correct_index,
                    )
                    for item in payload.questions
                ],
            )
    except GameError as exc:
        raise to_http_exception(exc) from exc
    return group_as_response(snapshot)


@router.get("/groups/{group_id}", response_model=GroupResponse)
async def get_group_route(group_id: str) -> GroupResponse:
    try:
        async with transaction() as session:
            snapshot = await get_group(session, group_id=group_id)
    except GameError as exc:
        raise to_http_exception(exc) from exc
    return group_as_response(snapshot)


@router.post("/groups/{group_id}/claim-host", response_model=GroupResponse)
async def claim_host_route(
    group_id: str,
    principal_id: str | None = Depends(get_principal_id),
) -> GroupResponse:
    bind_group_context(group_id=group_id, principal_id=principal_id)
    try:
        async with transaction() as session:
            now_utc = await GroupsRepo.server_now(session)
            snapshot = await claim_host(
                session,
                group_id=group_id,
                caller_id=principal_id,
                now_utc=now_utc,
            )
    except GameError as exc:
        raise to_http_exception(exc) from exc
    return group_as_response(snapshot)


@router.post("/groups/{group_id}/start", response_model=RoundTransitionResponse)
async def start_round_route(
    group_id: str,
    principal_id: str | None = Depends(get_principal_id),
) -> RoundTransitionResponse:
    bind_group_context(group_id=group_id, principal_id=principal_id)
    try:
        async with transaction() as session:
            now_utc = await GroupsRepo.server_now(session)
            result = await start_round(
                session,
                group_id=group_id,
                caller_id=principal_id,
                now_utc=now_utc,
            )
    except GameError as exc:
        raise to_http_exception(exc) from exc

    if result.changed:
        await notify_group(group_id, GROUP_EVENT_GROUP_UPDATED, status=result.snapshot.status)
    return RoundTransitionResponse(group=group_as_response(result.snapshot), changed=result.changed)


@router.post("/groups/{group_id}/finish", response_model=RoundTransitionResponse)
async def finish_round_route(
    group_id: str,
    principal_id: str | None = Depends(get_principal_id),
) -> RoundTransitionResponse:
    bind_group_context(group_id=group_id, principal_id=principal_id)
    try:
        async with transaction() as session:
            now_utc = await GroupsRepo.server_now(session)
            result = await finish_round(
                session,
                group_id=group_id,
                caller_id=principal_id,
                now_utc=now_utc,
            )
    except GameError as exc:
        raise to_http_exception(exc) from exc

    if result.changed:
        await notify_group(group_id, GROUP_EVENT_GROUP_UPDATED, status=result.snapshot.status)
    return RoundTransitionResponse(group=group_as_response(result.snapshot), changed=result.changed)


@router.get("/groups/{group_id}/questions", response_model=QuestionListResponse)
async def list_questions_route(
    group_id: str,
    principal_id: str | None = Depends(get_principal_id),
) -> QuestionListResponse:
    try:
        async with transaction() as session:
            views = await list_questions(session, group_id=group_id, caller_id=principal_id)
    except GameError as exc:
        raise to_http_exception(exc) from exc
    return QuestionListResponse(items=[question_as_response(view) for view in views])


@router.post("/groups/{group_id}/questions", response_model=QuestionResponse, status_code=201)
async def add_question_route(
    group_id: str,
    payload: QuestionCreateRequest,
    principal_id: str | None = Depends(get_principal_id),
) -> QuestionResponse:
    bind_group_context(group_id=group_id, principal_id=principal_id)
    try:
        async with transaction() as session:
            now_utc = await GroupsRepo.server_now(session)
            view = await add_question(
                session,
                group_id=group_id,
                caller_id=principal_id,
                text=payload.text,
                options=payload.options,
                correct_index=payload.correct_index,
                now_utc=now_utc,
            )
    except GameError as exc:
        raise to_http_exception(exc) from exc

    await notify_group(group_id, GROUP_EVENT_QUESTIONS_CHANGED, index=view.index)
    return question_as_response(view)


@router.delete("/groups/{group_id}/questions/{index}", response_model=QuestionRemovedResponse)
async def remove_question_route(
    group_id: str,
    index: int,
    principal_id: str | None = Depends(get_principal_id),
) -> QuestionRemovedResponse:
    bind_group_context(group_id=group_id, principal_id=principal_id)
    try:
        async with transaction() as session:
            now_utc = await GroupsRepo.server_now(session)
            question_count = await remove_question(
                session,
                group_id=group_id,
                caller_id=principal_id,
                index=index,
                now_utc=now_utc,
            )
    except GameError as exc:
        raise to_http_exception(exc) from exc

    await notify_group(group_id, GROUP_EVENT_QUESTIONS_CHANGED, question_count=question_count)
    return QuestionRemovedResponse(question_count=question_count)
