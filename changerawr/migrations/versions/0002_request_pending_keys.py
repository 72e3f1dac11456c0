"""Pending request keys: entry-scope duplicates, tag and project deletion guards

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0002"
down_revision: Union[str, Sequence[str], None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column("changelog_requests", sa.Column("pending_key", sa.String(20), nullable=True))
    # Existing rows were deduplicated per (entry, type)
    op.execute("UPDATE changelog_requests SET pending_key = type")

    op.drop_index("uq_changelog_requests_pending_entry_type", table_name="changelog_requests")
    op.create_index(
        "uq_changelog_requests_pending_entry",
        "changelog_requests",
        ["changelog_entry_id", "pending_key"],
        unique=True,
        postgresql_where=sa.text("status = 'PENDING'"),
    )
    op.create_index(
        "uq_changelog_requests_pending_tag",
        "changelog_requests",
        ["changelog_tag_id", "type"],
        unique=True,
        postgresql_where=sa.text("status = 'PENDING'"),
    )
    op.create_index(
        "uq_changelog_requests_pending_project_deletion",
        "changelog_requests",
        ["project_id", "type"],
        unique=True,
        postgresql_where=sa.text("status = 'PENDING' AND type = 'DELETE_PROJECT'"),
    )


def downgrade() -> None:
    op.drop_index("uq_changelog_requests_pending_project_deletion", table_name="changelog_requests")
    op.drop_index("uq_changelog_requests_pending_tag", table_name="changelog_requests")
    op.drop_index("uq_changelog_requests_pending_entry", table_name="changelog_requests")
    op.create_index(
        "uq_changelog_requests_pending_entry_type",
        "changelog_requests",
        ["changelog_entry_id", "type"],
        unique=True,
        postgresql_where=sa.text("status = 'PENDING'"),
    )
    op.drop_column("changelog_requests", "pending_key")
