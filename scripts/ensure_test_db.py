from __future__ import annotations

import asyncio
import re

import asyncpg
from sqlalchemy.engine import make_url

from topgamescore.core.config import get_settings
from topgamescore.core.integration_db_safety import unsafe_integration_db_reason

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


async def ensure_test_database(database_url: str) -> bool:
    """Create the integration-test database if missing. Returns True when created."""
    reason = unsafe_integration_db_reason(database_url)
    if reason is not None:
        raise RuntimeError(f"Refusing to create database: {reason}")

    parsed = make_url(database_url)
    db_name = parsed.database or ""
    if IDENTIFIER_RE.fullmatch(db_name) is None:
        raise RuntimeError(f"Unsupported database name {db_name!r}; use [A-Za-z0-9_] only.")

    conn = await asyncpg.connect(
        host=parsed.host or "localhost",
        port=int(parsed.port or 5432),
        user=parsed.username,
        password=parsed.password,
        database="postgres",
    )
    try:
        if await conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", db_name):
            return False
        await conn.execute(f'CREATE DATABASE "{db_name}"')
        return True
    finally:
        await conn.close()


def main() -> int:
    database_url = get_settings().database_url
    created = asyncio.run(ensure_test_database(database_url))
    db_name = make_url(database_url).database
    print(f"ensure_test_db: {'created' if created else 'exists'} db={db_name}")  # noqa: T201
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
