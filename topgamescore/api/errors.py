from __future__ import annotations

from fastapi import HTTPException

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
    QuestionValidationError,
    StorageFailureError,
    ValidationError,
)

# Most specific first.
_ERROR_CODES: tuple[tuple[type[GameError], int, str], ...] = (
    (PlayerValidationError, 422, "E_PLAYER_INVALID"),
    (QuestionValidationError, 422, "E_QUESTION_INVALID"),
    (InvalidAnswerOptionError, 422, "E_ANSWER_OPTION_INVALID"),
    (PlanLimitExceededError, 422, "E_PLAN_LIMIT_EXCEEDED"),
    (ValidationError, 422, "E_VALIDATION"),
    (ForbiddenError, 403, "E_FORBIDDEN"),
    (GroupNotFoundError, 404, "E_GROUP_NOT_FOUND"),
    (QuestionNotFoundError, 404, "E_QUESTION_NOT_FOUND"),
    (PlayerNotFoundError, 404, "E_PLAYER_NOT_FOUND"),
    (NotFoundError, 404, "E_NOT_FOUND"),
    (GroupNotOpenForJoinError, 409, "E_GROUP_NOT_OPEN_FOR_JOIN"),
    (GroupNotOpenError, 409, "E_GROUP_NOT_OPEN"),
    (InvalidStateError, 409, "E_INVALID_STATE"),
    (StorageFailureError, 503, "E_STORAGE_UNAVAILABLE"),
)


def to_http_exception(exc: GameError) -> HTTPException:
    for error_type, status_code, code in _ERROR_CODES:
        if isinstance(exc, error_type):
            detail: dict[str, object] = {"code": code}
            if isinstance(exc, (PlayerValidationError, QuestionValidationError)):
                detail["reason"] = exc.reason
            elif isinstance(exc, PlanLimitExceededError):
                detail["limit"] = exc.limit
            return HTTPException(status_code=status_code, detail=detail)
    return HTTPException(status_code=500, detail={"code": "E_INTERNAL"})
