from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

import pytest
from fastapi.testclient import TestClient

from topgamescore.api.routes import groups as groups_routes
from topgamescore.api.routes import internal_plans as internal_plans_routes
from topgamescore.api.routes import play as play_routes
from topgamescore.db.repo.groups_repo import GroupsRepo
from topgamescore.main import app

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@asynccontextmanager
async def _fake_transaction():  # noqa: ANN202
    yield object()


@pytest.fixture
def notifications(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, Any]]:
    sent: list[dict[str, Any]] = []

    async def _notify_group(group_id, event_type, *, status=None, feed=None, **payload):  # noqa: ANN001
        del feed
        sent.append({"group_id": group_id, "event_type": event_type, "status": status, "payload": payload})
        return True

    async def _server_now(session):  # noqa: ANN001
        del session
        return NOW

    for module in (groups_routes, play_routes, internal_plans_routes):
        monkeypatch.setattr(module, "transaction", _fake_transaction)
    monkeypatch.setattr(groups_routes, "notify_group", _notify_group)
    monkeypatch.setattr(play_routes, "notify_group", _notify_group)
    monkeypatch.setattr(GroupsRepo, "server_now", _server_now)
    return sent


@pytest.fixture
def client(notifications: list[dict[str, Any]]) -> TestClient:
    del notifications
    return TestClient(app)
