from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, String, text
from sqlalchemy.orm import Mapped, mapped_column

from topgamescore.db.models.base import Base


class HostAccount(Base):
    __tablename__ = "host_accounts"
    __table_args__ = (
        CheckConstraint("plan IN ('free','pro')", name="ck_host_accounts_plan"),
    )

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    plan: Mapped[str] = mapped_column(String(8), nullable=False, server_default=text("'free'"))
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
    current_period_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
