from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from topgamescore.db.models.base import Base


class Group(Base):
    __tablename__ = "groups"
    __table_args__ = (
        CheckConstraint(
            "status IN ('draft','open','finished')",
            name="ck_groups_status",
        ),
        CheckConstraint("plan IN ('free','pro')", name="ck_groups_plan"),
        CheckConstraint(
            "(plan = 'free') = (expires_at IS NOT NULL)",
            name="ck_groups_expiry_matches_plan",
        ),
        CheckConstraint("max_time_sec > 0", name="ck_groups_max_time_positive"),
        CheckConstraint(
            "current_question_index >= -1",
            name="ck_groups_current_question_index_range",
        ),
        CheckConstraint("question_count >= 0", name="ck_groups_question_count_non_negative"),
        Index("idx_groups_host", "host_id"),
        Index("idx_groups_plan_expires", "plan", "expires_at"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    host_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    title: Mapped[str] = mapped_column(String(128), nullable=False)
    locale: Mapped[str] = mapped_column(String(8), nullable=False, server_default=text("'en'"))
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    current_question_index: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        server_default=text("-1"),
    )
    round_started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    max_time_sec: Mapped[int] = mapped_column(Integer, nullable=False)
    plan: Mapped[str] = mapped_column(String(8), nullable=False)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    question_count: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
