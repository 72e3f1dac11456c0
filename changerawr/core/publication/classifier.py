"""Permission classifier for entry publication.

Decides, for a role, an action and a project's publication policy, whether
the action executes immediately, is queued for admin review, or is denied.

Decision table:

    role    action     policy                                  decision
    ------  ---------  --------------------------------------  --------------
    VIEWER  any        any                                     DENY
    ADMIN   any        any                                     EXECUTE_DIRECT
    STAFF   unpublish  any                                     EXECUTE_DIRECT
    STAFF   publish    allow_auto_publish                      EXECUTE_DIRECT
    STAFF   publish    require_approval, not allow_auto        QUEUE_REQUEST
    STAFF   publish    neither flag                            DENY
    STAFF   delete     any                                     QUEUE_REQUEST

The classifier is a pure function: it reads no clock, session or settings.
"""

from enum import Enum
from typing import NamedTuple, Optional, Union

from changerawr.core.rbac.roles import Role

from .policy import PublicationPolicy


class EntryAction(str, Enum):
    """Mutations a caller may request on a changelog entry."""
    PUBLISH = "publish"
    UNPUBLISH = "unpublish"
    DELETE = "delete"


class Decision(str, Enum):
    EXECUTE_DIRECT = "EXECUTE_DIRECT"
    QUEUE_REQUEST = "QUEUE_REQUEST"
    DENY = "DENY"


class Classification(NamedTuple):
    """A decision plus the reason shown to callers when it is DENY."""
    decision: Decision
    reason: Optional[str] = None


VIEWER_DENIED = "Viewers cannot modify changelog entries"
STAFF_PUBLISH_DISABLED = (
    "Publishing is disabled for staff on this project: it neither requires "
    "approval nor allows auto-publish"
)
UNKNOWN_ROLE = "Unknown role"


def classify(
    role: Union[Role, str],
    action: Union[EntryAction, str],
    policy: PublicationPolicy,
) -> Classification:
    """Classify an entry action for a role under a project policy."""
    try:
        role = Role(role)
    except ValueError:
        return Classification(Decision.DENY, UNKNOWN_ROLE)
    action = EntryAction(action)

    if role is Role.VIEWER:
        return Classification(Decision.DENY, VIEWER_DENIED)

    if role is Role.ADMIN:
        return Classification(Decision.EXECUTE_DIRECT)

    # STAFF
    if action is EntryAction.UNPUBLISH:
        return Classification(Decision.EXECUTE_DIRECT)

    if action is EntryAction.DELETE:
        return Classification(Decision.QUEUE_REQUEST)

    if policy.allow_auto_publish:
        return Classification(Decision.EXECUTE_DIRECT)
    if policy.require_approval:
        return Classification(Decision.QUEUE_REQUEST)
    return Classification(Decision.DENY, STAFF_PUBLISH_DISABLED)


def can_schedule(role: Union[Role, str], policy: PublicationPolicy) -> bool:
    """Whether a role may schedule or unschedule entries on a project."""
    try:
        role = Role(role)
    except ValueError:
        return False

    if role is Role.ADMIN:
        return True
    if role is Role.STAFF:
        return not policy.require_approval or policy.allow_auto_publish
    return False
