from __future__ import annotations

import pytest

from topgamescore.api.errors import to_http_exception
from topgamescore.game.errors import (
    ForbiddenError,
    GameError,
    GroupNotFoundError,
    GroupNotOpenError,
    GroupNotOpenForJoinError,
    InvalidAnswerOptionError,
    InvalidStateError,
    NotFoundError,
    PlanLimitExceededError,
    PlayerNotFoundError,
    PlayerValidationError,
    QuestionNotFoundError,
    StorageFailureError,
    ValidationError,
)


@pytest.mark.parametrize(
    ("error", "status_code", "code"),
    [
        (ValidationError("bad"), 422, "E_VALIDATION"),
        (InvalidAnswerOptionError(), 422, "E_ANSWER_OPTION_INVALID"),
        (ForbiddenError(), 403, "E_FORBIDDEN"),
        (GroupNotFoundError(), 404, "E_GROUP_NOT_FOUND"),
        (QuestionNotFoundError(), 404, "E_QUESTION_NOT_FOUND"),
        (PlayerNotFoundError(), 404, "E_PLAYER_NOT_FOUND"),
        (NotFoundError(), 404, "E_NOT_FOUND"),
        (GroupNotOpenForJoinError(), 409, "E_GROUP_NOT_OPEN_FOR_JOIN"),
        (GroupNotOpenError(), 409, "E_GROUP_NOT_OPEN"),
        (InvalidStateError(), 409, "E_INVALID_STATE"),
        (StorageFailureError(), 503, "E_STORAGE_UNAVAILABLE"),
        (GameError(), 500, "E_INTERNAL"),
    ],
)
def test_game_errors_map_to_stable_codes(error: GameError, status_code: int, code: str) -> None:
    exc = to_http_exception(error)
    assert exc.status_code == status_code
    assert exc.detail == {"code": code}


def test_validation_details_are_carried() -> None:
    assert to_http_exception(PlayerValidationError("name_too_long")).detail == {
        "code": "E_PLAYER_INVALID",
        "reason": "name_too_long",
    }
    assert to_http_exception(PlanLimitExceededError(10)).detail == {
        "code": "E_PLAN_LIMIT_EXCEEDED",
        "limit": 10,
    }
