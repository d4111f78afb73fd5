from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKeyConstraint,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from topgamescore.db.models.base import Base


class Answer(Base):
    __tablename__ = "answers"
    __table_args__ = (
        ForeignKeyConstraint(
            ["group_id", "player_id"],
            ["players.group_id", "players.player_id"],
            ondelete="CASCADE",
            name="fk_answers_player",
        ),
        CheckConstraint("q_index >= 0", name="ck_answers_q_index_non_negative"),
        CheckConstraint(
            "elapsed_ms IS NULL OR elapsed_ms >= 0",
            name="ck_answers_elapsed_ms_non_negative",
        ),
        CheckConstraint("score_awarded >= 0", name="ck_answers_score_non_negative"),
        CheckConstraint(
            "score_awarded = 0 OR correct",
            name="ck_answers_score_requires_correct",
        ),
        CheckConstraint(
            "chosen_index IS NOT NULL OR NOT correct",
            name="ck_answers_timeout_not_correct",
        ),
        Index("idx_answers_group_created", "group_id", "created_at"),
    )

    # One row per (group, player, question); the composite key is the duplicate guard.
    group_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    player_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    q_index: Mapped[int] = mapped_column(Integer, primary_key=True)
    chosen_index: Mapped[int | None] = mapped_column(Integer, nullable=True)
    correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
    elapsed_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    score_awarded: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
