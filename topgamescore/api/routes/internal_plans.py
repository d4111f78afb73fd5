from __future__ import annotations

import structlog
from fastapi import APIRouter, HTTPException, Request

from topgamescore.api.errors import to_http_exception
from topgamescore.core.config import get_settings
from topgamescore.db.repo.groups_repo import GroupsRepo
from topgamescore.db.unit_of_work import transaction
from topgamescore.economy.plans.service import PlanService
from topgamescore.game.errors import GameError
from topgamescore.services.internal_auth import (
    extract_client_ip,
    is_client_ip_allowed,
    is_internal_request_authenticated,
)

from .models import PlanSyncRequest, PlanSyncResponse

router = APIRouter(tags=["internal", "plans"])
logger = structlog.get_logger(__name__)


def _assert_internal_access(request: Request) -> None:
    settings = get_settings()
    client_ip = extract_client_ip(request)
    if not is_client_ip_allowed(client_ip=client_ip, allowlist=settings.internal_api_allowlist):
        logger.warning("internal_plans_auth_failed", reason="ip_not_allowed", client_ip=client_ip)
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})
    if not is_internal_request_authenticated(request, expected_token=settings.internal_api_token):
        logger.warning("internal_plans_auth_failed", reason="invalid_credentials", client_ip=client_ip)
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})


@router.post("/internal/plans/sync", response_model=PlanSyncResponse)
async def sync_plan(payload: PlanSyncRequest, request: Request) -> PlanSyncResponse:
    _assert_internal_access(request)
    try:
        async with transaction() as session:
            now_utc = await GroupsRepo.server_now(session)
            result = await PlanService.apply_plan_change(
                session,
                account_id=payload.account_id,
                plan=payload.plan,
                active=payload.active,
                current_period_end=payload.current_period_end,
                now_utc=now_utc,
            )
    except GameError as exc:
        raise to_http_exception(exc) from exc

    return PlanSyncResponse(
        account_id=result.account_id,
        plan=result.plan,
        is_pro=result.is_pro,
        groups_updated=result.groups_updated,
        expires_at=result.expires_at,
    )
