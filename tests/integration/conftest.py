from __future__ import annotations

import pytest
from sqlalchemy import text

from topgamescore.core.integration_db_safety import unsafe_integration_db_reason
from topgamescore.db.models import Base
from topgamescore.db.session import engine

TRUNCATE_TABLES = (
    "answers",
    "players",
    "questions",
    "groups",
    "host_accounts",
)

TRUNCATE_SQL = f"TRUNCATE TABLE {', '.join(TRUNCATE_TABLES)} CASCADE"


@pytest.fixture(scope="session", autouse=True)
def guard_integration_db_target() -> None:
    reason = unsafe_integration_db_reason(engine.url.render_as_string(hide_password=False))
    if reason is not None:
        pytest.skip(f"Refusing to run integration tests with destructive TRUNCATE: {reason}")


@pytest.fixture(autouse=True)
async def cleanup_db() -> None:
    # Pooled asyncpg connections are bound to the loop that opened them.
    await engine.dispose()

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:  # pragma: no cover - environment-dependent
        pytest.skip(f"Postgres is required for integration tests: {exc}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.execute(text(TRUNCATE_SQL))

    yield

    await engine.dispose()
