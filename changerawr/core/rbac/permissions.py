"""Permission model for Changerawr RBAC.

Permission string format: "resource:action"
Examples:
  - entries:update
  - requests:approve
  - audit_logs:export
"""

from enum import Enum
from typing import NamedTuple, FrozenSet


class Resource(str, Enum):
    """Resources that can be protected by permissions."""

    PROJECTS = "projects"         # Projects and their publication settings
    ENTRIES = "entries"           # Changelog entries
    TAGS = "tags"                 # Changelog tags
    REQUESTS = "requests"         # Queued staff requests
    AUDIT_LOGS = "audit_logs"     # System audit trail
    USERS = "users"               # User accounts


class Action(str, Enum):
    """Actions that can be performed on resources."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    LIST = "list"

    APPROVE = "approve"           # Approve queued requests
    REJECT = "reject"             # Reject queued requests
    EXPORT = "export"             # Export data (CSV)
    CONFIGURE = "configure"       # Change project settings


class Permission(NamedTuple):
    """A permission is a combination of resource and action."""
    resource: Resource
    action: Action

    def __str__(self) -> str:
        return f"{self.resource.value}:{self.action.value}"


# Maps each resource to its valid actions
PERMISSION_MATRIX: dict[Resource, FrozenSet[Action]] = {
    Resource.PROJECTS: frozenset([
        Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE,
        Action.LIST, Action.CONFIGURE,
    ]),
    Resource.ENTRIES: frozenset([
        Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE, Action.LIST,
    ]),
    Resource.TAGS: frozenset([
        Action.CREATE, Action.READ, Action.DELETE, Action.LIST,
    ]),
    Resource.REQUESTS: frozenset([
        Action.CREATE, Action.READ, Action.LIST, Action.APPROVE, Action.REJECT,
    ]),
    Resource.AUDIT_LOGS: frozenset([
        Action.READ, Action.LIST, Action.EXPORT,
    ]),
    Resource.USERS: frozenset([
        Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE, Action.LIST,
    ]),
}


def _generate_permission_definitions() -> dict[str, Permission]:
    """Generate all valid permission combinations from the matrix."""
    permissions = {}
    for resource, actions in PERMISSION_MATRIX.items():
        for action in actions:
            perm = Permission(resource, action)
            permissions[str(perm)] = perm
    return permissions


# All valid permissions as a dictionary: "resource:action" -> Permission
PERMISSION_DEFINITIONS = _generate_permission_definitions()


def is_valid_permission(perm_str: str) -> bool:
    """Check if a permission string is valid."""
    return perm_str in PERMISSION_DEFINITIONS
