"""initial schema

Revision ID: 3b7e2c91d4a0
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b7e2c91d4a0"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _uuid_pk() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True)


def _ts(name: str, *, nullable: bool = False, **kw) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable, **kw)


def upgrade() -> None:
    op.create_table(
        "users",
        _uuid_pk(),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(32), nullable=False, server_default="learner"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _ts("created_at", server_default=sa.func.now()),
        _ts("last_login", nullable=True),
    )

    op.create_table(
        "courses",
        _uuid_pk(),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column(
            "difficulty_level", sa.String(32), nullable=False, server_default="beginner"
        ),
        sa.Column("estimated_duration", sa.Integer(), nullable=True),
        sa.Column("thumbnail_url", sa.Text(), nullable=True),
        sa.Column(
            "is_published", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        _ts("created_at", server_default=sa.func.now()),
    )

    op.create_table(
        "course_modules",
        _uuid_pk(),
        sa.Column(
            "course_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("courses.id"),
            nullable=False,
        ),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.Column("module_type", sa.String(16), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("video_url", sa.Text(), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=True),
    )
    op.create_index("ix_course_modules_course_id", "course_modules", ["course_id"])

    op.create_table(
        "quiz_questions",
        _uuid_pk(),
        sa.Column(
            "module_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("course_modules.id"),
            nullable=False,
        ),
        sa.Column("question_text", sa.Text(), nullable=False),
        sa.Column("question_type", sa.String(32), nullable=False),
        sa.Column(
            "options",
            postgresql.ARRAY(sa.Text()),
            nullable=False,
            server_default="{}",
        ),
        sa.Column("correct_answer", sa.Text(), nullable=True),
        sa.Column("points", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("order_index", sa.Integer(), nullable=False),
    )
    op.create_index("ix_quiz_questions_module_id", "quiz_questions", ["module_id"])

    op.create_table(
        "user_enrollments",
        _uuid_pk(),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        sa.Column(
            "course_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("courses.id"),
            nullable=False,
        ),
        _ts("enrolled_at"),
        sa.Column(
            "progress_percentage",
            sa.Numeric(5, 2),
            nullable=False,
            server_default="0.00",
        ),
        sa.Column(
            "current_module_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("course_modules.id"),
            nullable=True,
        ),
        _ts("completed_at", nullable=True),
        sa.UniqueConstraint("user_id", "course_id", name="uq_enrollment_user_course"),
    )

    op.create_table(
        "user_progress",
        _uuid_pk(),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        sa.Column(
            "module_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("course_modules.id"),
            nullable=False,
        ),
        sa.Column("status", sa.String(32), nullable=False, server_default="not_started"),
        _ts("started_at"),
        _ts("updated_at"),
        sa.Column("time_spent", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("score", sa.Numeric(5, 2), nullable=True),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="1"),
        sa.UniqueConstraint("user_id", "module_id", name="uq_progress_user_module"),
    )

    op.create_table(
        "page_views",
        _uuid_pk(),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            nullable=True,
        ),
        sa.Column("session_id", sa.String(128), nullable=False),
        sa.Column("page_url", sa.Text(), nullable=False),
        sa.Column("page_title", sa.Text(), nullable=True),
        sa.Column("referrer_url", sa.Text(), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=False),
        sa.Column("time_on_page", sa.Integer(), nullable=True),
        _ts("recorded_at"),
    )
    op.create_index(
        "ix_page_views_user_recorded", "page_views", ["user_id", "recorded_at"]
    )

    op.create_table(
        "user_clicks",
        _uuid_pk(),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            nullable=True,
        ),
        sa.Column("session_id", sa.String(128), nullable=False),
        sa.Column("page_url", sa.Text(), nullable=False),
        sa.Column("element_id", sa.Text(), nullable=True),
        sa.Column("element_class", sa.Text(), nullable=True),
        sa.Column("element_text", sa.Text(), nullable=True),
        sa.Column("click_coordinates", postgresql.JSONB(), nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=False),
        _ts("recorded_at"),
    )
    op.create_index("ix_user_clicks_user_id", "user_clicks", ["user_id"])

    op.create_table(
        "video_interactions",
        _uuid_pk(),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            nullable=True,
        ),
        sa.Column("session_id", sa.String(128), nullable=False),
        sa.Column(
            "module_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("course_modules.id"),
            nullable=False,
        ),
        sa.Column("video_url", sa.Text(), nullable=False),
        sa.Column("action_type", sa.String(16), nullable=False),
        sa.Column("video_time", sa.Float(), nullable=True),
        sa.Column("duration", sa.Float(), nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=False),
        _ts("recorded_at"),
    )
    op.create_index(
        "ix_video_interactions_user_id", "video_interactions", ["user_id"]
    )

    op.create_table(
        "quiz_attempts",
        _uuid_pk(),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            nullable=True,
        ),
        sa.Column(
            "module_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("course_modules.id"),
            nullable=False,
        ),
        sa.Column("session_id", sa.String(128), nullable=False),
        _ts("started_at", nullable=True),
        _ts("completed_at", nullable=True),
        sa.Column("time_spent", sa.Integer(), nullable=True),
        sa.Column("score", sa.Numeric(5, 2), nullable=True),
        sa.Column("total_questions", sa.Integer(), nullable=True),
        sa.Column("correct_answers", sa.Integer(), nullable=True),
        sa.Column("answers", postgresql.JSONB(), nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=False),
        _ts("recorded_at"),
    )
    op.create_index(
        "ix_quiz_attempts_user_completed", "quiz_attempts", ["user_id", "completed_at"]
    )


def downgrade() -> None:
    op.drop_table("quiz_attempts")
    op.drop_table("video_interactions")
    op.drop_table("user_clicks")
    op.drop_table("page_views")
    op.drop_table("user_progress")
    op.drop_table("user_enrollments")
    op.drop_table("quiz_questions")
    op.drop_table("course_modules")
    op.drop_table("courses")
    op.drop_table("users")
