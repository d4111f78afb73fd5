from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

GROUP_EVENT_GROUP_UPDATED = "group_updated"
GROUP_EVENT_QUESTIONS_CHANGED = "questions_changed"
GROUP_EVENT_PLAYER_JOINED = "player_joined"
GROUP_EVENT_ANSWER_RECORDED = "answer_recorded"
GROUP_EVENT_TYPES = (
    GROUP_EVENT_GROUP_UPDATED,
    GROUP_EVENT_QUESTIONS_CHANGED,
    GROUP_EVENT_PLAYER_JOINED,
    GROUP_EVENT_ANSWER_RECORDED,
)


class GroupEvent(BaseModel):
    group_id: str
    event_type: str
    status: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)
