from __future__ import annotations

from datetime import datetime, timedelta

from topgamescore.economy.plans.constants import PLAN_FREE, PLAN_PRO


def is_pro_active(*, plan: str | None, active: bool | None) -> bool:
    return plan == PLAN_PRO and bool(active)


def resolve_group_plan(*, host_is_pro: bool) -> str:
    return PLAN_PRO if host_is_pro else PLAN_FREE


def resolve_group_expiry(*, plan: str, reference_utc: datetime, ttl_days: int) -> datetime | None:
    if plan == PLAN_PRO:
        return None
    return reference_utc + timedelta(days=max(1, int(ttl_days)))


def question_limit_for_plan(*, plan: str, free_limit: int) -> int | None:
    if plan == PLAN_PRO:
        return None
    return max(0, int(free_limit))


def is_group_expired(*, plan: str, expires_at: datetime | None, now_utc: datetime) -> bool:
    if plan != PLAN_FREE or expires_at is None:
        return False
    return expires_at <= now_utc
