from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from topgamescore.db.repo.groups_repo import GroupsRepo
from topgamescore.db.session import SessionLocal
from topgamescore.realtime.change_feed import get_change_feed
from topgamescore.workers.celery_app import celery_app

router = APIRouter(tags=["health"])

Probe = Callable[[], Awaitable[dict[str, Any]]]


def _probe_result(*, error: str | None = None, **extra: Any) -> dict[str, Any]:
    if error is not None:
        return {"status": "failed", "error": error}
    return {"status": "ok", **extra}


async def _check_database() -> dict[str, Any]:
    try:
        async with SessionLocal() as session:
            await GroupsRepo.server_now(session)
    except (SQLAlchemyError, OSError):
        return _probe_result(error="database_unavailable")
    return _probe_result()


async def _check_change_feed() -> dict[str, Any]:
    try:
        answered = await get_change_feed().ping()
    except (RedisError, OSError):
        return _probe_result(error="change_feed_unavailable")
    if not answered:
        return _probe_result(error="change_feed_unexpected_ping_reply")
    return _probe_result()


def _check_celery_worker_sync() -> dict[str, Any]:
    try:
        replies = celery_app.control.inspect(timeout=1.0).ping() or {}
    except Exception:
        return _probe_result(error="celery_unavailable")
    if not replies:
        return _probe_result(error="no_celery_worker_replied")
    return _probe_result(workers=len(replies))


async def _check_celery_worker() -> dict[str, Any]:
    return await asyncio.to_thread(_check_celery_worker_sync)


async def _run_probes(probes: dict[str, Probe]) -> dict[str, dict[str, Any]]:
    results = await asyncio.gather(*(probe() for probe in probes.values()))
    return dict(zip(probes, results))


def _probe_response(checks: dict[str, dict[str, Any]], *, ok_status: str, failed_status: str) -> JSONResponse:
    passing = all(check.get("status") == "ok" for check in checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK if passing else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": ok_status if passing else failed_status, "checks": checks},
    )


@router.get("/live")
async def live() -> dict[str, str]:
    return {"status": "live"}


@router.get("/health")
async def health() -> JSONResponse:
    checks = await _run_probes(
        {
            "database": _check_database,
            "change_feed": _check_change_feed,
            "celery": _check_celery_worker,
        }
    )
    return _probe_response(checks, ok_status="ok", failed_status="degraded")


@router.get("/ready")
async def ready() -> JSONResponse:
    checks = await _run_probes({"database": _check_database, "change_feed": _check_change_feed})
    return _probe_response(checks, ok_status="ready", failed_status="not_ready")
