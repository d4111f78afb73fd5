from __future__ import annotations

import math
from datetime import datetime

BASE_SCORE = 500
MAX_SPEED_BONUS = 500


def compute_elapsed_ms(*, now_utc: datetime, round_started_at: datetime | None) -> int:
    if round_started_at is None:
        return 0
    delta_ms = int((now_utc - round_started_at).total_seconds() * 1000)
    return max(0, delta_ms)


def is_correct_choice(*, chosen_index: int | None, correct_index: int) -> bool:
    if chosen_index is None:
        return False
    return chosen_index == correct_index


def _round_half_up(value: float) -> int:
    # Halves round towards +infinity.
    return int(math.floor(value + 0.5))


def compute_speed_bonus(*, elapsed_ms: int, max_time_sec: int) -> int:
    max_ms = max(1, int(max_time_sec) * 1000)
    bonus = _round_half_up(MAX_SPEED_BONUS * (1 - max(0, elapsed_ms) / max_ms))
    return max(0, bonus)


def compute_score(*, correct: bool, elapsed_ms: int | None, max_time_sec: int) -> int:
    """Points for one answer.

    Correct answers earn the base plus a bonus that decays linearly to zero
    at ``max_time_sec``. Late correct answers keep the base. Wrong answers
    and timeouts earn nothing.
    """
    if not correct:
        return 0
    return BASE_SCORE + compute_speed_bonus(elapsed_ms=elapsed_ms or 0, max_time_sec=max_time_sec)
