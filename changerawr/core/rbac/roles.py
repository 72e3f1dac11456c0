"""Role definitions for Changerawr.

Three fixed roles:
1. Admin - Full access, reviews staff requests
2. Staff - Writes entries, queues publish/delete requests
3. Viewer - Read-only access
"""

from enum import Enum
from typing import Dict, List, Union

from .permissions import Resource, Action, Permission


class Role(str, Enum):
    """Closed set of user roles."""
    ADMIN = "ADMIN"
    STAFF = "STAFF"
    VIEWER = "VIEWER"


def _build_permissions(*perms: tuple) -> List[str]:
    """Build permission strings from (Resource, Action) tuples."""
    return [str(Permission(r, a)) for r, a in perms]


# Admin: Full access to everything
ADMIN_PERMISSIONS = [
    "*:*"
]

STAFF_PERMISSIONS = _build_permissions(
    (Resource.PROJECTS, Action.READ),
    (Resource.PROJECTS, Action.LIST),

    (Resource.ENTRIES, Action.CREATE),
    (Resource.ENTRIES, Action.READ),
    (Resource.ENTRIES, Action.UPDATE),
    (Resource.ENTRIES, Action.LIST),

    (Resource.TAGS, Action.CREATE),
    (Resource.TAGS, Action.READ),
    (Resource.TAGS, Action.LIST),

    # Staff may queue requests and follow their own
    (Resource.REQUESTS, Action.CREATE),
    (Resource.REQUESTS, Action.READ),
    (Resource.REQUESTS, Action.LIST),
)

VIEWER_PERMISSIONS = _build_permissions(
    (Resource.PROJECTS, Action.READ),
    (Resource.PROJECTS, Action.LIST),
    (Resource.ENTRIES, Action.READ),
    (Resource.ENTRIES, Action.LIST),
    (Resource.TAGS, Action.READ),
    (Resource.TAGS, Action.LIST),
)


ROLE_PERMISSIONS: Dict[Role, List[str]] = {
    Role.ADMIN: ADMIN_PERMISSIONS,
    Role.STAFF: STAFF_PERMISSIONS,
    Role.VIEWER: VIEWER_PERMISSIONS,
}


def permissions_for_role(role: Union[Role, str]) -> List[str]:
    """Get the permissions list for a role. Unknown roles get nothing."""
    try:
        return ROLE_PERMISSIONS[Role(role)]
    except ValueError:
        return []
