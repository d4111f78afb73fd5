from __future__ import annotations

import secrets

from sqlalchemy.ext.asyncio import AsyncSession

from topgamescore.core.config import get_settings
from topgamescore.db.models.groups import Group
from topgamescore.db.models.questions import Question
from topgamescore.db.repo.groups_repo import GroupsRepo
from topgamescore.game.errors import ForbiddenError, GameError, QuestionValidationError, ValidationError
from topgamescore.game.groups.constants import (
    GROUP_CODE_ALPHABET,
    GROUP_CODE_LENGTH,
    QUESTION_MIN_OPTIONS,
    QUESTION_OPTION_MAX_LENGTH,
    QUESTION_TEXT_MAX_LENGTH,
)
from topgamescore.game.groups.types import GroupSnapshot, NewQuestion, QuestionView


def build_group_snapshot(group: Group) -> GroupSnapshot:
    return GroupSnapshot(
        group_id=group.id,
        host_id=group.host_id,
        title=group.title,
        locale=group.locale,
        status=group.status,
        current_question_index=group.current_question_index,
        round_started_at=group.round_started_at,
        max_time_sec=group.max_time_sec,
        plan=group.plan,
        expires_at=group.expires_at,
        question_count=group.question_count,
        created_at=group.created_at,
    )


def build_question_view(question: Question, *, reveal_correct: bool) -> QuestionView:
    return QuestionView(
        group_id=question.group_id,
        index=question.index,
        text=question.text,
        options=tuple(question.options),
        correct_index=question.correct_index if reveal_correct else None,
    )


def authorize_host(group: Group, *, caller_id: str | None) -> bool:
    """Check the caller against ``group.host_id``.

    An unset host is claimed by the caller. Returns True when the claim
    happened so callers can persist and log it.
    """
    if not caller_id:
        raise ForbiddenError
    if not group.host_id:
        group.host_id = caller_id
        return True
    if group.host_id != caller_id:
        raise ForbiddenError
    return False


def resolve_max_time_sec(max_time_sec: int | None) -> int:
    settings = get_settings()
    if max_time_sec is None:
        return int(settings.default_max_time_sec)
    value = int(max_time_sec)
    if value < settings.min_max_time_sec or value > settings.max_max_time_sec:
        raise ValidationError(
            f"max_time_sec must be between {settings.min_max_time_sec} and {settings.max_max_time_sec}"
        )
    return value


def normalize_new_question(*, text: str, options: list[str] | tuple[str, ...], correct_index: int) -> NewQuestion:
    cleaned_text = (text or "").strip()
    if not cleaned_text:
        raise QuestionValidationError("question text is required")
    if len(cleaned_text) > QUESTION_TEXT_MAX_LENGTH:
        raise QuestionValidationError("question text is too long")

    cleaned_options = tuple((option or "").strip() for option in options)
    if len(cleaned_options) < QUESTION_MIN_OPTIONS:
        raise QuestionValidationError(f"at least {QUESTION_MIN_OPTIONS} options are required")
    if any(not option for option in cleaned_options):
        raise QuestionValidationError("options cannot be empty")
    if any(len(option) > QUESTION_OPTION_MAX_LENGTH for option in cleaned_options):
        raise QuestionValidationError("option is too long")
    if correct_index < 0 or correct_index >= len(cleaned_options):
        raise QuestionValidationError("correct option is out of range")

    return NewQuestion(text=cleaned_text, options=cleaned_options, correct_index=int(correct_index))


async def generate_group_code(session: AsyncSession) -> str:
    for _ in range(10):
        code = "".join(secrets.choice(GROUP_CODE_ALPHABET) for _ in range(GROUP_CODE_LENGTH))
        existing = await GroupsRepo.get_by_id(session, code)
        if existing is None:
            return code
    raise GameError("unable to generate group code")
