from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class SubmitAnswerResult:
    group_id: str
    player_id: str
    q_index: int
    chosen_index: int | None
    correct: bool
    score_awarded: int
    elapsed_ms: int | None
    duplicate: bool
    total_score: int | None = None


@dataclass(slots=True)
class ReconciliationResult:
    group_id: str
    players_checked: int
    players_repaired: int
    repaired_points: int
    over_counted_player_ids: tuple[str, ...] = ()
