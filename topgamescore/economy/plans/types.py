from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class PlanChangeResult:
    account_id: str
    plan: str
    is_pro: bool
    groups_updated: int
    expires_at: datetime | None
