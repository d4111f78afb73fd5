from __future__ import annotations

from typing import Any

from topgamescore.realtime.change_feed import ChangeFeed, get_change_feed
from topgamescore.realtime.events import GroupEvent


async def notify_group(
    group_id: str,
    event_type: str,
    *,
    status: str | None = None,
    feed: ChangeFeed | None = None,
    **payload: Any,
) -> bool:
    """Publish a group change. Call only after the change is committed."""
    event = GroupEvent(group_id=group_id, event_type=event_type, status=status, payload=payload)
    return await (feed or get_change_feed()).publish(event)
