from __future__ import annotations

import asyncio
import json

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from topgamescore.realtime import publisher
from topgamescore.realtime.change_feed import ChangeFeed, Subscription, group_channel
from topgamescore.realtime.events import GROUP_EVENT_GROUP_UPDATED, GROUP_EVENT_PLAYER_JOINED, GroupEvent


class _FakePubSub:
    def __init__(self, messages: list[dict[str, object]]) -> None:
        self._messages = messages
        self.subscribed: list[str] = []
        self.unsubscribed: list[str] = []
        self.closed = False

    async def subscribe(self, channel: str) -> None:
        self.subscribed.append(channel)

    async def unsubscribe(self, channel: str) -> None:
        self.unsubscribed.append(channel)

    async def aclose(self) -> None:
        self.closed = True

    async def listen(self):  # noqa: ANN201
        for message in self._messages:
            yield message
        await asyncio.Event().wait()


class _FakeRedis:
    def __init__(self, *, fail_publish: bool = False, messages: list[dict[str, object]] | None = None) -> None:
        self.fail_publish = fail_publish
        self.published: list[tuple[str, str]] = []
        self.pubsub_instance = _FakePubSub(messages or [])

    async def publish(self, channel: str, data: str) -> int:
        if self.fail_publish:
            raise RedisConnectionError("redis down")
        self.published.append((channel, data))
        return 1

    def pubsub(self) -> _FakePubSub:
        return self.pubsub_instance


def test_group_channel_is_namespaced() -> None:
    assert group_channel("G1") == "topgamescore:group:G1"


@pytest.mark.asyncio
async def test_publish_serializes_event_to_group_channel() -> None:
    redis_client = _FakeRedis()
    feed = ChangeFeed(redis_client)

    sent = await feed.publish(GroupEvent(group_id="G1", event_type=GROUP_EVENT_GROUP_UPDATED, status="open"))

    assert sent is True
    channel, data = redis_client.published[0]
    assert channel == "topgamescore:group:G1"
    assert json.loads(data) == {
        "group_id": "G1",
        "event_type": "group_updated",
        "status": "open",
        "payload": {},
    }


@pytest.mark.asyncio
async def test_publish_failure_is_reported_not_raised() -> None:
    feed = ChangeFeed(_FakeRedis(fail_publish=True))

    sent = await feed.publish(GroupEvent(group_id="G1", event_type=GROUP_EVENT_GROUP_UPDATED))

    assert sent is False


@pytest.mark.asyncio
async def test_notify_group_builds_payload_from_keywords() -> None:
    redis_client = _FakeRedis()

    sent = await publisher.notify_group(
        "G1",
        GROUP_EVENT_PLAYER_JOINED,
        feed=ChangeFeed(redis_client),
        player_id="p1",
    )

    assert sent is True
    assert json.loads(redis_client.published[0][1])["payload"] == {"player_id": "p1"}


@pytest.mark.asyncio
async def test_subscription_delivers_valid_events_and_skips_noise() -> None:
    valid = GroupEvent(group_id="G1", event_type=GROUP_EVENT_GROUP_UPDATED, status="finished")
    redis_client = _FakeRedis(
        messages=[
            {"type": "subscribe", "data": 1},
            {"type": "message", "data": "not json"},
            {"type": "message", "data": valid.model_dump_json()},
        ]
    )
    feed = ChangeFeed(redis_client)
    received: list[GroupEvent] = []
    delivered = asyncio.Event()

    async def _handler(event: GroupEvent) -> None:
        received.append(event)
        delivered.set()

    subscription = await feed.subscribe("G1", _handler)
    await asyncio.wait_for(delivered.wait(), timeout=1)
    await subscription.close()
    await subscription.close()

    assert received == [valid]
    pubsub = redis_client.pubsub_instance
    assert pubsub.subscribed == ["topgamescore:group:G1"]
    assert pubsub.unsubscribed == ["topgamescore:group:G1"]
    assert pubsub.closed is True
    assert subscription.closed is True


@pytest.mark.asyncio
async def test_failing_handler_does_not_stop_listener() -> None:
    first = GroupEvent(group_id="G1", event_type=GROUP_EVENT_PLAYER_JOINED)
    second = GroupEvent(group_id="G1", event_type=GROUP_EVENT_GROUP_UPDATED, status="open")
    redis_client = _FakeRedis(
        messages=[
            {"type": "message", "data": first.model_dump_json()},
            {"type": "message", "data": second.model_dump_json()},
        ]
    )
    feed = ChangeFeed(redis_client)
    received: list[str] = []
    delivered = asyncio.Event()

    async def _handler(event: GroupEvent) -> None:
        received.append(event.event_type)
        if event.event_type == GROUP_EVENT_PLAYER_JOINED:
            raise RuntimeError("boom")
        delivered.set()

    subscription = await feed.subscribe("G1", _handler)
    await asyncio.wait_for(delivered.wait(), timeout=1)
    await subscription.close()

    assert received == ["player_joined", "group_updated"]


@pytest.mark.asyncio
async def test_close_releases_pubsub_after_listener_crash() -> None:
    async def crashed_listener() -> None:
        raise RedisConnectionError("connection lost")

    pubsub = _FakePubSub([])
    task = asyncio.create_task(crashed_listener())
    await asyncio.sleep(0)
    subscription = Subscription(group_id="G1", pubsub=pubsub, task=task)

    await subscription.close()

    assert task.done() is True
    assert subscription.closed is True
    assert pubsub.unsubscribed == ["topgamescore:group:G1"]
    assert pubsub.closed is True
