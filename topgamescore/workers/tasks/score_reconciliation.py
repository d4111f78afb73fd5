from __future__ import annotations

from datetime import datetime, timedelta, timezone
from time import perf_counter

import structlog

from topgamescore.core.config import get_settings
from topgamescore.db.repo.answers_repo import AnswersRepo
from topgamescore.db.session import SessionLocal
from topgamescore.game.scoring.reconciliation import reconcile_group_totals
from topgamescore.services.alerts import send_ops_alert
from topgamescore.workers.asyncio_runner import run_async_job
from topgamescore.workers.celery_app import celery_app

logger = structlog.get_logger(__name__)


def _clamp_lookback_hours(value: int) -> int:
    return max(1, min(24 * 30, int(value)))


def _clamp_batch_size(value: int) -> int:
    return max(1, min(5000, int(value)))


def _clamp_schedule_seconds(value: int) -> int:
    return max(30, min(86400, int(value)))


async def run_score_reconciliation_async() -> dict[str, object]:
    settings = get_settings()
    now_utc = datetime.now(timezone.utc)
    lookback_hours = _clamp_lookback_hours(settings.score_reconciliation_lookback_hours)
    batch_size = _clamp_batch_size(settings.score_reconciliation_batch_size)
    since_utc = now_utc - timedelta(hours=lookback_hours)
    started_at = perf_counter()

    async with SessionLocal.begin() as session:
        group_ids = await AnswersRepo.list_group_ids_answered_since(
            session,
            since_utc=since_utc,
            limit=batch_size,
        )

    players_checked = 0
    players_repaired = 0
    repaired_points = 0
    over_counted: dict[str, list[str]] = {}
    for group_id in group_ids:
        async with SessionLocal.begin() as session:
            group_result = await reconcile_group_totals(session, group_id=group_id)
        players_checked += group_result.players_checked
        players_repaired += group_result.players_repaired
        repaired_points += group_result.repaired_points
        if group_result.over_counted_player_ids:
            over_counted[group_id] = list(group_result.over_counted_player_ids)

    result: dict[str, object] = {
        "generated_at": now_utc.isoformat(),
        "lookback_hours": lookback_hours,
        "groups_checked": len(group_ids),
        "players_checked": players_checked,
        "players_repaired": players_repaired,
        "repaired_points": repaired_points,
        "groups_over_counted": len(over_counted),
        "duration_ms": int((perf_counter() - started_at) * 1000),
    }

    if over_counted:
        logger.warning("score_reconciliation_over_counted", **result)
        await send_ops_alert(
            event="score_totals_over_counted",
            payload={**result, "over_counted": over_counted},
        )
    elif players_repaired > 0:
        logger.warning("score_reconciliation_finished", **result)
        await send_ops_alert(event="score_reconciliation_repaired", payload=result)
    else:
        logger.info("score_reconciliation_finished", **result)
    return result


@celery_app.task(name="topgamescore.workers.tasks.score_reconciliation.run_score_reconciliation")
def run_score_reconciliation() -> dict[str, object]:
    return run_async_job(run_score_reconciliation_async())


celery_app.conf.beat_schedule = celery_app.conf.beat_schedule or {}
settings = get_settings()
celery_app.conf.beat_schedule.update(
    {
        "score-reconciliation": {
            "task": "topgamescore.workers.tasks.score_reconciliation.run_score_reconciliation",
            "schedule": float(_clamp_schedule_seconds(settings.score_reconciliation_schedule_seconds)),
            "options": {"queue": "q_low"},
        },
    }
)
