"""initial schema: users, library, plan data and local settings

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _base_columns():
    return [
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def _owner():
    return sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)


def _subject():
    return sa.Column("subject_id", sa.Integer(), sa.ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)


def _indexes(table: str, *columns: str, unique=()):
    for col in ("id", "created_at") + columns:
        op.create_index(f"ix_{table}_{col}", table, [col], unique=col in unique)


def upgrade() -> None:
    op.create_table(
        "users",
        *_base_columns(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("avatar_url", sa.String(512), nullable=True),
        sa.Column("token_version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
    )
    _indexes("users", "email", unique=("email",))

    op.create_table(
        "programs",
        *_base_columns(),
        _owner(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("institution", sa.String(255), nullable=True),
        sa.Column("color", sa.String(32), nullable=True),
        sa.Column("icon", sa.String(64), nullable=True),
        sa.Column("syllabus_file_path", sa.String(512), nullable=True),
        sa.Column("syllabus_file_name", sa.String(255), nullable=True),
        sa.Column("syllabus_file_size", sa.Integer(), nullable=True),
    )
    _indexes("programs", "user_id")

    op.create_table(
        "subjects",
        *_base_columns(),
        _owner(),
        sa.Column("program_id", sa.Integer(), sa.ForeignKey("programs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("color", sa.String(32), nullable=True),
        sa.Column("icon", sa.String(64), nullable=True),
        sa.Column("instructor_name", sa.String(255), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("syllabus_file_path", sa.String(512), nullable=True),
        sa.Column("syllabus_file_name", sa.String(255), nullable=True),
        sa.Column("syllabus_file_size", sa.Integer(), nullable=True),
    )
    _indexes("subjects", "user_id", "program_id")

    op.create_table(
        "topics",
        *_base_columns(),
        _owner(),
        _subject(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
    )
    _indexes("topics", "user_id", "subject_id")

    op.create_table(
        "study_materials",
        *_base_columns(),
        _owner(),
        _subject(),
        sa.Column("topic_id", sa.Integer(), sa.ForeignKey("topics.id", ondelete="SET NULL"), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("file_path", sa.String(512), nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("mime_type", sa.String(128), nullable=True),
        sa.Column("ai_status", sa.String(20), nullable=False, server_default="pending"),
    )
    _indexes("study_materials", "user_id", "subject_id", "topic_id")

    op.create_table(
        "subject_events",
        *_base_columns(),
        _owner(),
        _subject(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("event_type", sa.String(50), nullable=False),
        sa.Column("event_date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
    )
    _indexes("subject_events", "user_id", "subject_id", "event_date")

    op.create_table(
        "subject_schedules",
        *_base_columns(),
        _owner(),
        _subject(),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
    )
    _indexes("subject_schedules", "user_id", "subject_id", "day_of_week")

    op.create_table(
        "weekly_goals",
        *_base_columns(),
        _owner(),
        _subject(),
        sa.Column("target_hours", sa.Float(), nullable=False),
        sa.Column("current_hours", sa.Float(), nullable=False, server_default="0"),
        sa.Column("week_start", sa.Date(), nullable=False),
        sa.Column("week_end", sa.Date(), nullable=False),
    )
    _indexes("weekly_goals", "user_id", "subject_id", "week_start")

    op.create_table(
        "study_sessions",
        *_base_columns(),
        _owner(),
        _subject(),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    _indexes("study_sessions", "user_id", "subject_id", "start_time")

    op.create_table(
        "local_settings",
        *_base_columns(),
        sa.Column("key", sa.String(128), nullable=False),
        sa.Column("value", sa.Text(), nullable=True),
    )
    _indexes("local_settings", "key", unique=("key",))


def downgrade() -> None:
    for table in (
        "local_settings",
        "study_sessions",
        "weekly_goals",
        "subject_schedules",
        "subject_events",
        "study_materials",
        "topics",
        "subjects",
        "programs",
        "users",
    ):
        op.drop_table(table)
