"""Request review state machine.

Validates review transitions and the reviewer's permissions.
"""

from typing import Optional

from changerawr.core.errors import AuthorizationError, ConflictError
from changerawr.core.rbac.checker import PermissionChecker

from .states import (
    RequestStatus,
    RequestTransition,
    can_transition,
    get_transition_rule,
)


class InvalidTransitionError(ConflictError):
    """Raised when a review transition is not allowed from the current state."""

    def __init__(self, message: str, from_state: RequestStatus, transition: RequestTransition):
        super().__init__(message)
        self.from_state = from_state
        self.transition = transition


class PermissionDeniedError(AuthorizationError):
    """Raised when the reviewer lacks permission for a transition."""

    def __init__(self, required_permission: str):
        super().__init__(f"Permission denied: requires {required_permission}")
        self.required_permission = required_permission


class RequestStateMachine:
    """State machine for a single changelog request."""

    def __init__(self, current_state: RequestStatus, *, user_permissions: Optional[list[str]] = None):
        self._state = RequestStatus(current_state)
        self._checker = PermissionChecker(user_permissions or [])

    @property
    def state(self) -> RequestStatus:
        return self._state

    def transition(self, transition: RequestTransition) -> RequestStatus:
        """
        Perform a state transition.

        Returns:
            The new state after transition

        Raises:
            InvalidTransitionError: If the transition is invalid
            PermissionDeniedError: If user lacks required permission
        """
        if not can_transition(self._state, transition):
            raise InvalidTransitionError(
                f"Request is already {self._state.value.lower()}",
                self._state,
                transition,
            )

        rule = get_transition_rule(self._state, transition)
        if rule.requires_permission and not self._checker.has_permission(rule.requires_permission):
            raise PermissionDeniedError(rule.requires_permission)

        self._state = rule.to_state
        return self._state
