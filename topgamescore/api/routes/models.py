from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class QuestionCreateRequest(BaseModel):
    text: str = Field(min_length=1, max_length=500)
    options: list[str] = Field(min_length=2)
    correct_index: int = Field(ge=0)


class GroupCreateRequest(BaseModel):
    title: str | None = Field(default=None, max_length=128)
    max_time_sec: int | None = None
    locale: str | None = Field(default=None, max_length=16)
    questions: list[QuestionCreateRequest] = Field(default_factory=list)


class GroupResponse(BaseModel):
    group_id: str
    host_id: str | None = None
    title: str
    locale: str
    status: str
    current_question_index: int
    round_started_at: datetime | None = None
    max_time_sec: int
    plan: str
    expires_at: datetime | None = None
    question_count: int = Field(ge=0)
    created_at: datetime


class RoundTransitionResponse(BaseModel):
    group: GroupResponse
    changed: bool


class QuestionResponse(BaseModel):
    index: int = Field(ge=0)
    text: str
    options: list[str]
    correct_index: int | None = None


class QuestionListResponse(BaseModel):
    items: list[QuestionResponse]


class QuestionRemovedResponse(BaseModel):
    question_count: int = Field(ge=0)


class JoinRequest(BaseModel):
    name: str
    handle: str


class PlayerResponse(BaseModel):
    player_id: str
    name: str
    handle: str
    total_score: int = Field(ge=0)
    joined_at: datetime


class JoinResponse(BaseModel):
    player: PlayerResponse
    group_status: str
    created: bool


class ProgressResponse(BaseModel):
    group_status: str
    question_count: int = Field(ge=0)
    answered_indexes: list[int]
    next_question_index: int | None = None
    completed: bool
    total_score: int = Field(ge=0)


class QuestionRoundResponse(BaseModel):
    question: QuestionResponse
    max_time_sec: int
    started_at: datetime
    elapsed_ms: int = Field(ge=0)
    already_answered: bool


class AnswerSubmitRequest(BaseModel):
    q_index: int = Field(ge=0)
    chosen_index: int | None = Field(default=None, ge=0)


class AnswerSubmitResponse(BaseModel):
    q_index: int
    chosen_index: int | None = None
    correct: bool
    score_awarded: int = Field(ge=0)
    elapsed_ms: int | None = None
    duplicate: bool
    total_score: int | None = None


class LeaderboardEntryResponse(BaseModel):
    rank: int = Field(ge=1)
    player_id: str
    name: str
    handle: str
    total_score: int = Field(ge=0)


class LeaderboardResponse(BaseModel):
    group_id: str
    source: str
    items: list[LeaderboardEntryResponse]


class PlanSyncRequest(BaseModel):
    account_id: str = Field(min_length=1, max_length=128)
    plan: str = Field(min_length=1, max_length=16)
    active: bool
    current_period_end: datetime | None = None


class PlanSyncResponse(BaseModel):
    account_id: str
    plan: str
    is_pro: bool
    groups_updated: int = Field(ge=0)
    expires_at: datetime | None = None
