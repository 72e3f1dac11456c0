"""Changelog request states and transitions.

State Machine Diagram:

    ┌──────────┐
    │ PENDING  │ ← Created by the request ledger
    └────┬─────┘
         │
         ├───────────────┐
         │               │
    ┌────▼─────┐   ┌─────▼────┐
    │ APPROVED │   │ REJECTED │
    └──────────┘   └──────────┘

Both outcomes are terminal.
"""

from enum import Enum
from typing import Set, Dict, Optional, NamedTuple


class RequestType(str, Enum):
    """Kinds of change a staff member can queue."""
    ALLOW_PUBLISH = "ALLOW_PUBLISH"
    DELETE_ENTRY = "DELETE_ENTRY"
    DELETE_TAG = "DELETE_TAG"
    DELETE_PROJECT = "DELETE_PROJECT"


class RequestStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class RequestTransition(str, Enum):
    """Review actions that move a request out of PENDING."""
    APPROVE = "approve"      # PENDING → APPROVED
    REJECT = "reject"        # PENDING → REJECTED


class TransitionRule(NamedTuple):
    """Defines a valid state transition."""
    from_state: RequestStatus
    to_state: RequestStatus
    transition: RequestTransition
    requires_permission: Optional[str] = None


TRANSITION_RULES: list[TransitionRule] = [
    TransitionRule(RequestStatus.PENDING, RequestStatus.APPROVED, RequestTransition.APPROVE,
                   "requests:approve"),
    TransitionRule(RequestStatus.PENDING, RequestStatus.REJECTED, RequestTransition.REJECT,
                   "requests:reject"),
]

# Build lookup tables for efficient access
VALID_TRANSITIONS: Dict[RequestStatus, Set[RequestTransition]] = {}
TRANSITION_TARGETS: Dict[tuple[RequestStatus, RequestTransition], TransitionRule] = {}

for rule in TRANSITION_RULES:
    VALID_TRANSITIONS.setdefault(rule.from_state, set()).add(rule.transition)
    TRANSITION_TARGETS[(rule.from_state, rule.transition)] = rule

# Review outcome requested through the API -> transition that produces it
TRANSITION_FOR_STATUS: Dict[RequestStatus, RequestTransition] = {
    RequestStatus.APPROVED: RequestTransition.APPROVE,
    RequestStatus.REJECTED: RequestTransition.REJECT,
}


def can_transition(from_state: RequestStatus, transition: RequestTransition) -> bool:
    """Check if a transition is valid from the given state."""
    return transition in VALID_TRANSITIONS.get(from_state, set())


def get_transition_rule(from_state: RequestStatus, transition: RequestTransition) -> Optional[TransitionRule]:
    """Get the transition rule for a state/action combination."""
    return TRANSITION_TARGETS.get((from_state, transition))
