"""Database models for Changerawr."""

from changerawr.db.models.user import User
from changerawr.db.models.project import Project
from changerawr.db.models.changelog import Changelog, ChangelogEntry, entry_tags
from changerawr.db.models.tag import ChangelogTag
from changerawr.db.models.request import ChangelogRequest
from changerawr.db.models.audit import AuditLog, AuditSeverity

__all__ = [
    "User",
    "Project",
    "Changelog",
    "ChangelogEntry",
    "entry_tags",
    "ChangelogTag",
    "ChangelogRequest",
    "AuditLog",
    "AuditSeverity",
]
