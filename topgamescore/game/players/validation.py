from __future__ import annotations

from topgamescore.game.errors import PlayerValidationError
from topgamescore.game.players.constants import (
    PLAYER_HANDLE_MAX_LENGTH,
    PLAYER_HANDLE_MIN_LENGTH,
    PLAYER_HANDLE_PREFIX,
    PLAYER_NAME_MAX_LENGTH,
)


def normalize_player_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise PlayerValidationError("name_required")
    if len(cleaned) > PLAYER_NAME_MAX_LENGTH:
        raise PlayerValidationError("name_too_long")
    return cleaned


def normalize_player_handle(handle: str | None) -> str:
    """Return a trimmed handle like ``@ana``.

    The handle must start with ``@`` and carry at least one more
    character with no whitespace anywhere.
    """
    cleaned = (handle or "").strip()
    if not cleaned:
        raise PlayerValidationError("handle_required")
    if not cleaned.startswith(PLAYER_HANDLE_PREFIX):
        raise PlayerValidationError("handle_prefix")
    if len(cleaned) < PLAYER_HANDLE_MIN_LENGTH:
        raise PlayerValidationError("handle_too_short")
    if len(cleaned) > PLAYER_HANDLE_MAX_LENGTH:
        raise PlayerValidationError("handle_too_long")
    if any(char.isspace() for char in cleaned):
        raise PlayerValidationError("handle_whitespace")
    return cleaned
