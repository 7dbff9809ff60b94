"""Create admin, issue and comment tables.

Revision ID: 0001_issues_and_comments
Revises:
Create Date: 2026-10-19 00:00:00
"""
import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_issues_and_comments"
down_revision = None
branch_labels = None
depends_on = None

issue_category = sa.Enum("Electricity", "Roads", "Water", "Waste", "Safety", name="issuecategory")
issue_status = sa.Enum("Pending", "In-Progress", "Resolved", name="issuestatus")
author_type = sa.Enum("admin", "reporter", name="authortype")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "admin",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_admin_id", "admin", ["id"])
    op.create_index("ix_admin_email", "admin", ["email"], unique=True)
    op.create_index("ix_admin_created_at", "admin", ["created_at"])

    op.create_table(
        "issue",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", issue_category, nullable=False),
        sa.Column("location", sa.String(length=500), nullable=False),
        sa.Column("status", issue_status, nullable=False),
        sa.Column("photo_url", sa.String(length=1024), nullable=True),
        sa.Column("reporter_name", sa.String(length=255), nullable=True),
        sa.Column("reporter_email", sa.String(length=255), nullable=True),
        sa.Column("reporter_phone", sa.String(length=50), nullable=True),
        sa.Column("last_admin_view", sa.DateTime(), nullable=True),
        sa.Column("last_reporter_view", sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_issue_id", "issue", ["id"])
    op.create_index("ix_issue_category", "issue", ["category"])
    op.create_index("ix_issue_status", "issue", ["status"])
    op.create_index("ix_issue_created_at", "issue", ["created_at"])

    op.create_table(
        "comment",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author_name", sa.String(length=255), nullable=False),
        sa.Column("author_type", author_type, nullable=False),
        sa.Column(
            "issue_id",
            sa.Integer(),
            sa.ForeignKey("issue.id", ondelete="CASCADE"),
            nullable=False,
        ),
        *_timestamps(),
    )
    op.create_index("ix_comment_id", "comment", ["id"])
    op.create_index("ix_comment_issue_id", "comment", ["issue_id"])
    op.create_index("ix_comment_created_at", "comment", ["created_at"])


def downgrade() -> None:
    op.drop_table("comment")
    op.drop_table("issue")
    op.drop_table("admin")
    author_type.drop(op.get_bind(), checkfirst=True)
    issue_status.drop(op.get_bind(), checkfirst=True)
    issue_category.drop(op.get_bind(), checkfirst=True)
