from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class GroupSnapshot:
    group_id: str
    host_id: str | None
    title: str
    locale: str
    status: str
    current_question_index: int
    round_started_at: datetime | None
    max_time_sec: int
    plan: str
    expires_at: datetime | None
    question_count: int
    created_at: datetime


@dataclass(slots=True)
class QuestionView:
    group_id: str
    index: int
    text: str
    options: tuple[str, ...]
    correct_index: int | None = None


@dataclass(slots=True)
class NewQuestion:
    text: str
    options: tuple[str, ...]
    correct_index: int


@dataclass(slots=True)
class RoundTransitionResult:
    snapshot: GroupSnapshot
    changed: bool
