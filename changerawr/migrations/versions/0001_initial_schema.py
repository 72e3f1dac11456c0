"""Initial schema: users, projects, changelogs, entries, tags, requests, audit_logs

Revision ID: 0001
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all core tables."""

    # --- users (no FK deps) ---
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="VIEWER"),
        sa.Column("is_active", sa.Boolean(), server_default="true"),
        sa.Column("notifications_enabled", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()")),
        sa.Column("last_login", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_email", "users", ["email"])

    # --- projects (no FK deps) ---
    op.create_table(
        "projects",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("require_approval", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("allow_auto_publish", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("default_tags", sa.JSON(), nullable=False, server_default="[]"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint("id", name="pk_projects"),
        sa.UniqueConstraint("slug", name="uq_projects_slug"),
    )
    op.create_index("ix_projects_slug", "projects", ["slug"])

    # --- changelogs (FK -> projects, one per project) ---
    op.create_table(
        "changelogs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint("id", name="pk_changelogs"),
        sa.UniqueConstraint("project_id", name="uq_changelogs_project_id"),
        sa.ForeignKeyConstraint(
            ["project_id"], ["projects.id"],
            name="fk_changelogs_project_id_projects", ondelete="CASCADE",
        ),
    )

    # --- changelog_tags (no FK deps) ---
    op.create_table(
        "changelog_tags",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("color", sa.String(7), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint("id", name="pk_changelog_tags"),
        sa.UniqueConstraint("name", name="uq_changelog_tags_name"),
    )
    op.create_index("ix_changelog_tags_name", "changelog_tags", ["name"])

    # --- changelog_entries (FK -> changelogs) ---
    op.create_table(
        "changelog_entries",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("changelog_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("version", sa.String(100), nullable=True),
        sa.Column("published_at", sa.DateTime(), nullable=True),
        sa.Column("scheduled_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint("id", name="pk_changelog_entries"),
        sa.ForeignKeyConstraint(
            ["changelog_id"], ["changelogs.id"],
            name="fk_changelog_entries_changelog_id_changelogs", ondelete="CASCADE",
        ),
    )
    op.create_index("ix_changelog_entries_changelog_id", "changelog_entries", ["changelog_id"])
    op.create_index("ix_changelog_entries_created_at", "changelog_entries", ["created_at"])
    op.create_index(
        "ix_changelog_entries_scheduled_published", "changelog_entries", ["scheduled_at", "published_at"]
    )

    # --- changelog_entry_tags (junction, cascades both ways) ---
    op.create_table(
        "changelog_entry_tags",
        sa.Column("entry_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("tag_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.PrimaryKeyConstraint("entry_id", "tag_id", name="pk_changelog_entry_tags"),
        sa.ForeignKeyConstraint(
            ["entry_id"], ["changelog_entries.id"],
            name="fk_changelog_entry_tags_entry_id", ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["tag_id"], ["changelog_tags.id"],
            name="fk_changelog_entry_tags_tag_id", ondelete="CASCADE",
        ),
    )
    op.create_index("ix_changelog_entry_tags_tag_id", "changelog_entry_tags", ["tag_id"])

    # --- changelog_requests (FK -> users, projects, entries, tags) ---
    op.create_table(
        "changelog_requests",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("staff_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("admin_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("changelog_entry_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("changelog_tag_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint("id", name="pk_changelog_requests"),
        sa.ForeignKeyConstraint(
            ["staff_id"], ["users.id"],
            name="fk_changelog_requests_staff_id_users", ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["admin_id"], ["users.id"],
            name="fk_changelog_requests_admin_id_users", ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["project_id"], ["projects.id"],
            name="fk_changelog_requests_project_id_projects", ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["changelog_entry_id"], ["changelog_entries.id"],
            name="fk_changelog_requests_entry_id", ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["changelog_tag_id"], ["changelog_tags.id"],
            name="fk_changelog_requests_tag_id", ondelete="SET NULL",
        ),
    )
    op.create_index("ix_changelog_requests_status", "changelog_requests", ["status"])
    op.create_index("ix_changelog_requests_staff_id", "changelog_requests", ["staff_id"])
    op.create_index("ix_changelog_requests_project_id", "changelog_requests", ["project_id"])
    op.create_index("ix_changelog_requests_changelog_entry_id", "changelog_requests", ["changelog_entry_id"])
    op.create_index("ix_changelog_requests_created_at", "changelog_requests", ["created_at"])

    # At most one pending request per (entry, type)
    op.create_index(
        "uq_changelog_requests_pending_entry_type",
        "changelog_requests",
        ["changelog_entry_id", "type"],
        unique=True,
        postgresql_where=sa.text("status = 'PENDING'"),
    )

    # --- audit_logs (FK -> users) ---
    op.create_table(
        "audit_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("resource_type", sa.String(100), nullable=False),
        sa.Column("resource_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("severity", sa.String(20), nullable=False, server_default="info"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint("id", name="pk_audit_logs"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"],
            name="fk_audit_logs_user_id_users", ondelete="SET NULL",
        ),
    )
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_project_id", "audit_logs", ["project_id"])
    op.create_index("ix_audit_logs_created_at_id", "audit_logs", ["created_at", "id"])


def downgrade() -> None:
    """Drop all core tables in reverse dependency order."""
    op.drop_table("audit_logs")
    op.drop_table("changelog_requests")
    op.drop_table("changelog_entry_tags")
    op.drop_table("changelog_entries")
    op.drop_table("changelog_tags")
    op.drop_table("changelogs")
    op.drop_table("projects")
    op.drop_table("users")
