from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from topgamescore.api.routes import internal_plans
from topgamescore.economy.plans.service import PlanService
from topgamescore.economy.plans.types import PlanChangeResult

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
PAYLOAD = {"account_id": "host-1", "plan": "pro", "active": False}


def _settings(allowlist: str = "127.0.0.1/32,testclient") -> SimpleNamespace:
    return SimpleNamespace(internal_api_token="internal-secret", internal_api_allowlist=allowlist)


def test_internal_plans_rejects_missing_token(monkeypatch, client) -> None:
    monkeypatch.setattr(internal_plans, "get_settings", lambda: _settings())
    monkeypatch.setattr(internal_plans, "is_client_ip_allowed", lambda **kwargs: True)

    response = client.post("/internal/plans/sync", json=PAYLOAD)

    assert response.status_code == 403
    assert response.json() == {"detail": {"code": "E_FORBIDDEN"}}


def test_internal_plans_rejects_disallowed_ip(monkeypatch, client) -> None:
    monkeypatch.setattr(internal_plans, "get_settings", lambda: _settings("192.168.0.0/16"))

    response = client.post(
        "/internal/plans/sync",
        json=PAYLOAD,
        headers={"X-Internal-Token": "internal-secret"},
    )

    assert response.status_code == 403
    assert response.json() == {"detail": {"code": "E_FORBIDDEN"}}


def test_internal_plans_applies_change(monkeypatch, client) -> None:
    captured: dict[str, object] = {}

    async def _apply_plan_change(session, **kwargs):  # noqa: ANN001
        del session
        captured.update(kwargs)
        return PlanChangeResult(
            account_id="host-1",
            plan="free",
            is_pro=False,
            groups_updated=2,
            expires_at=NOW + timedelta(days=7),
        )

    monkeypatch.setattr(internal_plans, "get_settings", lambda: _settings())
    monkeypatch.setattr(internal_plans, "is_client_ip_allowed", lambda **kwargs: True)
    monkeypatch.setattr(PlanService, "apply_plan_change", _apply_plan_change)

    response = client.post(
        "/internal/plans/sync",
        json=PAYLOAD,
        headers={"X-Internal-Token": "internal-secret"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["plan"] == "free"
    assert body["groups_updated"] == 2
    assert captured["now_utc"] == NOW
    assert captured["active"] is False
