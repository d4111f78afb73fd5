from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from topgamescore.db.repo.groups_repo import GroupsRepo
from topgamescore.db.repo.host_accounts_repo import HostAccountsRepo
from topgamescore.economy.plans.service import PlanService
from topgamescore.game.errors import ValidationError

UTC = timezone.utc
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


@pytest.mark.asyncio
async def test_is_host_pro_checks_account_state(monkeypatch) -> None:
    accounts = {
        "pro-host": SimpleNamespace(plan="pro", active=True),
        "lapsed-host": SimpleNamespace(plan="pro", active=False),
    }

    async def _get_by_id(session, account_id):  # noqa: ANN001
        del session
        return accounts.get(account_id)

    monkeypatch.setattr(HostAccountsRepo, "get_by_id", _get_by_id)

    assert await PlanService.is_host_pro(object(), host_id="pro-host") is True
    assert await PlanService.is_host_pro(object(), host_id="lapsed-host") is False
    assert await PlanService.is_host_pro(object(), host_id="unknown") is False
    assert await PlanService.is_host_pro(object(), host_id=None) is False


@pytest.mark.asyncio
async def test_apply_plan_change_upgrades_host_groups(monkeypatch) -> None:
    upserts: list[dict[str, object]] = []
    group_updates: list[dict[str, object]] = []

    async def _upsert_plan(session, **kwargs):  # noqa: ANN001
        del session
        upserts.append(kwargs)

    async def _set_plan_for_host(session, **kwargs):  # noqa: ANN001
        del session
        group_updates.append(kwargs)
        return 3

    monkeypatch.setattr(HostAccountsRepo, "upsert_plan", _upsert_plan)
    monkeypatch.setattr(GroupsRepo, "set_plan_for_host", _set_plan_for_host)

    result = await PlanService.apply_plan_change(
        object(),
        account_id="host-1",
        plan="pro",
        active=True,
        now_utc=NOW,
    )

    assert result.plan == "pro"
    assert result.is_pro is True
    assert result.groups_updated == 3
    assert result.expires_at is None
    assert upserts[0]["account_id"] == "host-1"
    assert group_updates == [{"host_id": "host-1", "plan": "pro", "expires_at": None, "now_utc": NOW}]


@pytest.mark.asyncio
async def test_inactive_pro_subscription_downgrades_with_fresh_ttl(monkeypatch) -> None:
    group_updates: list[dict[str, object]] = []

    async def _upsert_plan(session, **kwargs):  # noqa: ANN001
        del session, kwargs

    async def _set_plan_for_host(session, **kwargs):  # noqa: ANN001
        del session
        group_updates.append(kwargs)
        return 1

    monkeypatch.setattr(HostAccountsRepo, "upsert_plan", _upsert_plan)
    monkeypatch.setattr(GroupsRepo, "set_plan_for_host", _set_plan_for_host)

    result = await PlanService.apply_plan_change(
        object(),
        account_id="host-1",
        plan="pro",
        active=False,
        now_utc=NOW,
    )

    assert result.plan == "free"
    assert result.is_pro is False
    assert result.expires_at == NOW + timedelta(days=7)
    assert group_updates[0]["expires_at"] == NOW + timedelta(days=7)


@pytest.mark.asyncio
async def test_apply_plan_change_rejects_unknown_plan() -> None:
    with pytest.raises(ValidationError):
        await PlanService.apply_plan_change(
            object(),
            account_id="host-1",
            plan="enterprise",
            active=True,
            now_utc=NOW,
        )
