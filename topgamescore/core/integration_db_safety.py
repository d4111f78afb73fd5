from __future__ import annotations

from sqlalchemy.engine import make_url

ALLOWED_LOCAL_HOSTS = frozenset(
    {
        "localhost",
        "127.0.0.1",
        "::1",
        "postgres",
        "topgamescore_postgres",
    }
)


def unsafe_integration_db_reason(database_url: str) -> str | None:
    """Return why ``database_url`` must not be truncated by tests, or None if it may."""
    parsed = make_url(database_url)
    db_name = (parsed.database or "").strip()
    host = (parsed.host or "").strip().lower()

    if parsed.get_backend_name() != "postgresql":
        return "integration tests support only PostgreSQL"
    if "test" not in db_name.lower():
        return f"database name {db_name!r} does not look like a test database"
    if host not in ALLOWED_LOCAL_HOSTS:
        return f"host {host!r} is not a local integration-test host"
    return None
