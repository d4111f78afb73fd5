from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from topgamescore.db.models.base import Base


class Player(Base):
    __tablename__ = "players"
    __table_args__ = (
        CheckConstraint("total_score >= 0", name="ck_players_total_score_non_negative"),
        CheckConstraint(
            "current_question_index >= -1",
            name="ck_players_current_question_index_range",
        ),
        Index("idx_players_group_score", "group_id", "total_score"),
    )

    group_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("groups.id", ondelete="CASCADE"),
        primary_key=True,
    )
    player_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    handle: Mapped[str] = mapped_column(String(32), nullable=False)
    total_score: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    current_question_index: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        server_default=text("-1"),
    )
    question_started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
