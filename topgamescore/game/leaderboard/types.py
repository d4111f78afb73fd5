from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class PlayerStanding:
    player_id: str
    name: str
    handle: str
    total_score: int


@dataclass(slots=True, frozen=True)
class LeaderboardEntry:
    rank: int
    player_id: str
    name: str
    handle: str
    total_score: int
