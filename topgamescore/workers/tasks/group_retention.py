from __future__ import annotations

from time import perf_counter

import structlog

from topgamescore.core.config import get_settings
from topgamescore.db.repo.groups_repo import GroupsRepo
from topgamescore.db.session import SessionLocal
from topgamescore.workers.asyncio_runner import run_async_job
from topgamescore.workers.celery_app import celery_app

logger = structlog.get_logger(__name__)


def _clamp_batch_size(value: int) -> int:
    return max(1, min(10000, int(value)))


def _clamp_max_batches(value: int) -> int:
    return max(1, min(1000, int(value)))


def _clamp_schedule_seconds(value: int) -> int:
    return max(60, min(86400, int(value)))


async def run_group_retention_async() -> dict[str, object]:
    """Delete free groups past their expiry; questions, players and answers cascade."""
    settings = get_settings()
    batch_size = _clamp_batch_size(settings.retention_groups_batch_size)
    max_batches = _clamp_max_batches(settings.retention_groups_max_batches)
    started_at = perf_counter()

    groups_deleted = 0
    batches_executed = 0
    for _ in range(max_batches):
        async with SessionLocal.begin() as session:
            now_utc = await GroupsRepo.server_now(session)
            deleted_ids = await GroupsRepo.delete_expired_free_batch(
                session,
                now_utc=now_utc,
                limit=batch_size,
            )
        batches_executed += 1
        groups_deleted += len(deleted_ids)
        if len(deleted_ids) < batch_size:
            break

    result: dict[str, object] = {
        "batch_size": batch_size,
        "batches_executed": batches_executed,
        "groups_deleted": groups_deleted,
        "duration_ms": int((perf_counter() - started_at) * 1000),
    }
    logger.info("group_retention_finished", **result)
    return result


@celery_app.task(name="topgamescore.workers.tasks.group_retention.run_group_retention")
def run_group_retention() -> dict[str, object]:
    return run_async_job(run_group_retention_async())


celery_app.conf.beat_schedule = celery_app.conf.beat_schedule or {}
settings = get_settings()
celery_app.conf.beat_schedule.update(
    {
        "group-retention": {
            "task": "topgamescore.workers.tasks.group_retention.run_group_retention",
            "schedule": float(_clamp_schedule_seconds(settings.group_retention_schedule_seconds)),
            "options": {"queue": "q_low"},
        },
    }
)
