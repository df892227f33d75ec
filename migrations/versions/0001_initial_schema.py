"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

profiles, user_books and reading_progress_history: the tables the
stats service reads.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    reading_status_enum = sa.Enum(
        "WANT_TO_READ", "READING", "COMPLETED", "ABANDONED",
        name="reading_status_enum",
    )
    reading_status_enum.create(op.get_bind(), checkfirst=True)

    # --- profiles ---
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("username", sa.String(64), nullable=True),
        sa.Column("is_stats_public", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("week_start_day", sa.String(16), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # --- user_books ---
    op.create_table(
        "user_books",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(512), nullable=False),
        sa.Column("cover", sa.String(1024), nullable=True),
        sa.Column("status", sa.Enum(
            "WANT_TO_READ", "READING", "COMPLETED", "ABANDONED",
            name="reading_status_enum", create_type=False,
        ), nullable=False),
        sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_books_user_id", "user_books", ["user_id"])
    op.create_index("ix_user_books_status", "user_books", ["status"])

    # --- reading_progress_history ---
    op.create_table(
        "reading_progress_history",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("user_book_id", sa.String(36), nullable=False),
        sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("pages_read", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("recorded_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["user_book_id"], ["user_books.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_reading_progress_history_user_id", "reading_progress_history", ["user_id"])
    op.create_index("ix_reading_progress_history_user_book_id", "reading_progress_history", ["user_book_id"])
    op.create_index("ix_reading_progress_history_recorded_at", "reading_progress_history", ["recorded_at"])


def downgrade() -> None:
    op.drop_index("ix_reading_progress_history_recorded_at", table_name="reading_progress_history")
    op.drop_index("ix_reading_progress_history_user_book_id", table_name="reading_progress_history")
    op.drop_index("ix_reading_progress_history_user_id", table_name="reading_progress_history")
    op.drop_table("reading_progress_history")

    op.drop_index("ix_user_books_status", table_name="user_books")
    op.drop_index("ix_user_books_user_id", table_name="user_books")
    op.drop_table("user_books")

    op.drop_table("profiles")

    sa.Enum(name="reading_status_enum").drop(op.get_bind(), checkfirst=True)
