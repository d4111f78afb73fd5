class GameError(Exception):
    pass


class ValidationError(GameError):
    pass


class PlayerValidationError(ValidationError):
    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class QuestionValidationError(ValidationError):
    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class InvalidAnswerOptionError(ValidationError):
    pass


class PlanLimitExceededError(ValidationError):
    def __init__(self, limit: int) -> None:
        super().__init__(f"question limit reached: {limit}")
        self.limit = limit


class ForbiddenError(GameError):
    pass


class NotFoundError(GameError):
    pass


class GroupNotFoundError(NotFoundError):
    pass


class QuestionNotFoundError(NotFoundError):
    pass


class PlayerNotFoundError(NotFoundError):
    pass


class InvalidStateError(GameError):
    pass


class GroupNotOpenError(InvalidStateError):
    pass


class GroupNotOpenForJoinError(InvalidStateError):
    pass


class StorageFailureError(GameError):
    pass
