from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from topgamescore.game.groups.types import QuestionView


@dataclass(slots=True)
class PlayerSnapshot:
    group_id: str
    player_id: str
    name: str
    handle: str
    total_score: int
    joined_at: datetime
    current_question_index: int


@dataclass(slots=True)
class JoinResult:
    player: PlayerSnapshot
    group_status: str
    created: bool


@dataclass(slots=True)
class PlayerProgress:
    group_id: str
    player_id: str
    group_status: str
    question_count: int
    answered_indexes: tuple[int, ...]
    next_question_index: int | None
    total_score: int

    @property
    def completed(self) -> bool:
        return self.next_question_index is None


@dataclass(slots=True)
class QuestionRound:
    question: QuestionView
    max_time_sec: int
    started_at: datetime
    elapsed_ms: int
    already_answered: bool
