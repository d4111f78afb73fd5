from __future__ import annotations

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from topgamescore.realtime.change_feed import get_change_feed
from topgamescore.realtime.events import GroupEvent

router = APIRouter(tags=["events"])
logger = structlog.get_logger(__name__)


@router.websocket("/groups/{group_id}/events")
async def group_events(websocket: WebSocket, group_id: str) -> None:
    await websocket.accept()

    async def _relay(event: GroupEvent) -> None:
        await websocket.send_text(event.model_dump_json())

    subscription = await get_change_feed().subscribe(group_id, _relay)
    logger.info("group_events_connected", group_id=group_id)
    try:
        # Client messages are ignored; the loop only waits for disconnect.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("group_events_disconnected", group_id=group_id)
    finally:
        await subscription.close()
