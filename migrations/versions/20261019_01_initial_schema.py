"""initial schema: users, AI activity logs, exams, study material

Revision ID: initial_schema_2026
Revises:
Create Date: 2026-10-19 09:00:00

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "initial_schema_2026"
down_revision = None
branch_labels = None
depends_on = None

plan_tier = sa.Enum("free", "premium", name="plantier")


def _id_column():
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False)


def _user_fk():
    return sa.Column(
        "user_id",
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("users.id"),
        nullable=False,
    )


def _created_at():
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def upgrade():
    op.create_table(
        "users",
        _id_column(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("objective", sa.String(), nullable=True),
        sa.Column("plan", plan_tier, nullable=False, server_default=sa.text("'free'")),
        sa.Column("is_premium", sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "chat_exchanges",
        _id_column(),
        _user_fk(),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("answer", sa.Text(), nullable=True),
        sa.Column("subject", sa.String(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_chat_exchanges_user_id", "chat_exchanges", ["user_id"])
    op.create_index("ix_chat_exchanges_created_at", "chat_exchanges", ["created_at"])

    op.create_table(
        "essay_records",
        _id_column(),
        _user_fk(),
        sa.Column("theme", sa.Text(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("total_score", sa.Integer(), nullable=False),
        sa.Column("competency_1", sa.Integer(), nullable=False),
        sa.Column("competency_2", sa.Integer(), nullable=False),
        sa.Column("competency_3", sa.Integer(), nullable=False),
        sa.Column("competency_4", sa.Integer(), nullable=False),
        sa.Column("competency_5", sa.Integer(), nullable=False),
        sa.Column("feedback", sa.Text(), nullable=True),
        _created_at(),
        sa.CheckConstraint("total_score BETWEEN 0 AND 1000", name="ck_essay_records_total_score"),
        sa.CheckConstraint(
            "total_score = competency_1 + competency_2 + competency_3 + competency_4 + competency_5",
            name="ck_essay_records_total_is_sum",
        ),
    )
    op.create_index("ix_essay_records_user_id", "essay_records", ["user_id"])
    op.create_index("ix_essay_records_created_at", "essay_records", ["created_at"])

    op.create_table(
        "exam_results",
        _id_column(),
        _user_fk(),
        sa.Column("type", sa.String(), nullable=False, server_default=sa.text("'geral'")),
        sa.Column("subject", sa.String(), nullable=True),
        sa.Column("question_count", sa.Integer(), nullable=False),
        sa.Column("correct_count", sa.Integer(), nullable=False),
        sa.Column("percent_correct", sa.Integer(), nullable=False),
        sa.Column("time_spent_minutes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("session_id", postgresql.UUID(as_uuid=True), nullable=False),
        _created_at(),
        sa.UniqueConstraint("session_id", name="uq_exam_results_session_id"),
    )
    op.create_index("ix_exam_results_user_id", "exam_results", ["user_id"])
    op.create_index("ix_exam_results_created_at", "exam_results", ["created_at"])

    op.create_table(
        "questions",
        _id_column(),
        sa.Column("prompt", sa.Text(), nullable=False),
        sa.Column("options", sa.JSON(), nullable=False),
        sa.Column("correct_option", sa.String(), nullable=False),
        sa.Column("subject", sa.String(), nullable=False),
        sa.Column("difficulty", sa.Integer(), nullable=False, server_default=sa.text("1")),
        _created_at(),
        sa.CheckConstraint("difficulty BETWEEN 1 AND 3", name="ck_questions_difficulty"),
    )
    op.create_index("ix_questions_subject", "questions", ["subject"])

    op.create_table(
        "study_plans",
        _id_column(),
        _user_fk(),
        sa.Column("focus_area", sa.String(), nullable=False),
        sa.Column("plan_content", sa.Text(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_study_plans_user_id", "study_plans", ["user_id"])

    op.create_table(
        "library_resources",
        _id_column(),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("kind", sa.String(), nullable=False),
        sa.Column("subject", sa.String(), nullable=False),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("url", sa.String(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_library_resources_subject", "library_resources", ["subject"])

    op.create_table(
        "progress",
        _id_column(),
        _user_fk(),
        sa.Column("subject", sa.String(), nullable=False),
        sa.Column("hours", sa.Float(), nullable=True),
        sa.Column("percent_correct", sa.Integer(), nullable=True),
        sa.Column("activity_date", sa.Date(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_progress_user_id", "progress", ["user_id"])


def downgrade():
    op.drop_index("ix_progress_user_id", table_name="progress")
    op.drop_table("progress")
    op.drop_index("ix_library_resources_subject", table_name="library_resources")
    op.drop_table("library_resources")
    op.drop_index("ix_study_plans_user_id", table_name="study_plans")
    op.drop_table("study_plans")
    op.drop_index("ix_questions_subject", table_name="questions")
    op.drop_table("questions")
    op.drop_index("ix_exam_results_created_at", table_name="exam_results")
    op.drop_index("ix_exam_results_user_id", table_name="exam_results")
    op.drop_table("exam_results")
    op.drop_index("ix_essay_records_created_at", table_name="essay_records")
    op.drop_index("ix_essay_records_user_id", table_name="essay_records")
    op.drop_table("essay_records")
    op.drop_index("ix_chat_exchanges_created_at", table_name="chat_exchanges")
    op.drop_index("ix_chat_exchanges_user_id", table_name="chat_exchanges")
    op.drop_table("chat_exchanges")
    op.drop_table("users")
    plan_tier.drop(op.get_bind(), checkfirst=True)
