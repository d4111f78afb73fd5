from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from topgamescore.db.session import SessionLocal
from topgamescore.game.errors import StorageFailureError

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def transaction() -> AsyncIterator[AsyncSession]:
    """Run one unit of work; commit on success, roll back on any error.

    Driver-level failures surface as ``StorageFailureError`` so callers can
    retry the whole operation. Domain errors propagate unchanged.
    """
    try:
        async with SessionLocal.begin() as session:
            yield session
    except DBAPIError as exc:
        logger.warning(
            "storage_operation_failed",
            error_type=type(exc.orig).__name__ if exc.orig is not None else type(exc).__name__,
            connection_invalidated=exc.connection_invalidated,
        )
        raise StorageFailureError(str(exc.__class__.__name__)) from exc
