from __future__ import annotations

from fastapi import Header

PRINCIPAL_HEADER = "X-Principal-Id"


def get_principal_id(x_principal_id: str | None = Header(default=None)) -> str | None:
    if x_principal_id is None:
        return None
    principal_id = x_principal_id.strip()
    return principal_id or None
