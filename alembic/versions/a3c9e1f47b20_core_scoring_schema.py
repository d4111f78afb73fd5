"""core_scoring_schema

Revision ID: a3c9e1f47b20
Revises:
Create Date: 2026-10-19 10:00:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "a3c9e1f47b20"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "host_accounts",
        sa.Column("id", sa.String(128), primary_key=True),
        sa.Column("plan", sa.String(8), nullable=False, server_default=sa.text("'free'")),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("current_period_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("plan IN ('free','pro')", name="ck_host_accounts_plan"),
    )

    op.create_table(
        "groups",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("host_id", sa.String(128), nullable=True),
        sa.Column("title", sa.String(128), nullable=False),
        sa.Column("locale", sa.String(8), nullable=False, server_default=sa.text("'en'")),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("current_question_index", sa.Integer(), nullable=False, server_default=sa.text("-1")),
        sa.Column("round_started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("max_time_sec", sa.Integer(), nullable=False),
        sa.Column("plan", sa.String(8), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("question_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("status IN ('draft','open','finished')", name="ck_groups_status"),
        sa.CheckConstraint("plan IN ('free','pro')", name="ck_groups_plan"),
        sa.CheckConstraint("(plan = 'free') = (expires_at IS NOT NULL)", name="ck_groups_expiry_matches_plan"),
        sa.CheckConstraint("max_time_sec > 0", name="ck_groups_max_time_positive"),
        sa.CheckConstraint("current_question_index >= -1", name="ck_groups_current_question_index_range"),
        sa.CheckConstraint("question_count >= 0", name="ck_groups_question_count_non_negative"),
    )
    op.create_index("idx_groups_host", "groups", ["host_id"])
    op.create_index("idx_groups_plan_expires", "groups", ["plan", "expires_at"])

    op.create_table(
        "questions",
        sa.Column("group_id", sa.String(32), nullable=False),
        sa.Column("index", sa.Integer(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("options", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("correct_index", sa.Integer(), nullable=False),
        sa.CheckConstraint("index >= 0", name="ck_questions_index_non_negative"),
        sa.CheckConstraint("jsonb_array_length(options) >= 2", name="ck_questions_options_min_two"),
        sa.CheckConstraint(
            "correct_index >= 0 AND correct_index < jsonb_array_length(options)",
            name="ck_questions_correct_index_in_options",
        ),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("group_id", "index"),
    )

    op.create_table(
        "players",
        sa.Column("group_id", sa.String(32), nullable=False),
        sa.Column("player_id", sa.String(128), nullable=False),
        sa.Column("name", sa.String(64), nullable=False),
        sa.Column("handle", sa.String(32), nullable=False),
        sa.Column("total_score", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("current_question_index", sa.Integer(), nullable=False, server_default=sa.text("-1")),
        sa.Column("question_started_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("total_score >= 0", name="ck_players_total_score_non_negative"),
        sa.CheckConstraint("current_question_index >= -1", name="ck_players_current_question_index_range"),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("group_id", "player_id"),
    )
    op.create_index("idx_players_group_score", "players", ["group_id", "total_score"])

    op.create_table(
        "answers",
        sa.Column("group_id", sa.String(32), nullable=False),
        sa.Column("player_id", sa.String(128), nullable=False),
        sa.Column("q_index", sa.Integer(), nullable=False),
        sa.Column("chosen_index", sa.Integer(), nullable=True),
        sa.Column("correct", sa.Boolean(), nullable=False),
        sa.Column("elapsed_ms", sa.Integer(), nullable=True),
        sa.Column("score_awarded", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("q_index >= 0", name="ck_answers_q_index_non_negative"),
        sa.CheckConstraint("elapsed_ms IS NULL OR elapsed_ms >= 0", name="ck_answers_elapsed_ms_non_negative"),
        sa.CheckConstraint("score_awarded >= 0", name="ck_answers_score_non_negative"),
        sa.CheckConstraint("score_awarded = 0 OR correct", name="ck_answers_score_requires_correct"),
        sa.CheckConstraint("chosen_index IS NOT NULL OR NOT correct", name="ck_answers_timeout_not_correct"),
        sa.ForeignKeyConstraint(
            ["group_id", "player_id"],
            ["players.group_id", "players.player_id"],
            ondelete="CASCADE",
            name="fk_answers_player",
        ),
        sa.PrimaryKeyConstraint("group_id", "player_id", "q_index"),
    )
    op.create_index("idx_answers_group_created", "answers", ["group_id", "created_at"])


def downgrade() -> None:
    op.drop_index("idx_answers_group_created", table_name="answers")
    op.drop_table("answers")
    op.drop_index("idx_players_group_score", table_name="players")
    op.drop_table("players")
    op.drop_table("questions")
    op.drop_index("idx_groups_plan_expires", table_name="groups")
    op.drop_index("idx_groups_host", table_name="groups")
    op.drop_table("groups")
    op.drop_table("host_accounts")
