from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from functools import lru_cache

import structlog
from pydantic import ValidationError as PydanticValidationError
from redis.asyncio import Redis
from redis.asyncio.client import PubSub
from redis.exceptions import RedisError

from topgamescore.core.config import get_settings
from topgamescore.realtime.events import GroupEvent

logger = structlog.get_logger(__name__)

GROUP_CHANNEL_PREFIX = "topgamescore:group:"

GroupEventHandler = Callable[[GroupEvent], Awaitable[None]]


def group_channel(group_id: str) -> str:
    return f"{GROUP_CHANNEL_PREFIX}{group_id}"


class Subscription:
    """Handle for one group listener. ``close()`` must be called on teardown."""

    def __init__(self, *, group_id: str, pubsub: PubSub, task: asyncio.Task[None]) -> None:
        self.group_id = group_id
        self._pubsub = pubsub
        self._task = task
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        except Exception as exc:
            logger.warning("group_listener_failed", group_id=self.group_id, error=str(exc))
        try:
            await self._pubsub.unsubscribe(group_channel(self.group_id))
        except RedisError as exc:
            logger.warning("group_unsubscribe_failed", group_id=self.group_id, error=str(exc))
        finally:
            await self._pubsub.aclose()


class ChangeFeed:
    def __init__(self, redis_client: Redis) -> None:
        self._redis = redis_client

    @classmethod
    def from_url(cls, redis_url: str) -> ChangeFeed:
        return cls(Redis.from_url(redis_url))

    async def publish(self, event: GroupEvent) -> bool:
        # Failures are logged, never raised.
        try:
            await self._redis.publish(group_channel(event.group_id), event.model_dump_json())
        except RedisError as exc:
            logger.warning(
                "group_event_publish_failed",
                group_id=event.group_id,
                event_type=event.event_type,
                error=str(exc),
            )
            return False
        return True

    async def subscribe(self, group_id: str, handler: GroupEventHandler) -> Subscription:
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(group_channel(group_id))
        task = asyncio.create_task(self._listen(group_id, pubsub, handler))
        return Subscription(group_id=group_id, pubsub=pubsub, task=task)

    async def _listen(self, group_id: str, pubsub: PubSub, handler: GroupEventHandler) -> None:
        async for message in pubsub.listen():
            if message.get("type") != "message":
                continue
            try:
                event = GroupEvent.model_validate_json(message["data"])
            except PydanticValidationError:
                logger.warning("group_event_malformed", group_id=group_id)
                continue
            try:
                await handler(event)
            except Exception:
                logger.exception(
                    "group_event_handler_failed",
                    group_id=group_id,
                    event_type=event.event_type,
                )

    async def ping(self) -> bool:
        return await self._redis.ping() is True

    async def aclose(self) -> None:
        await self._redis.aclose()


@lru_cache(maxsize=1)
def get_change_feed() -> ChangeFeed:
    return ChangeFeed.from_url(get_settings().redis_url)
