"""Queued staff requests: ledger, review state machine and processors."""

from .states import RequestType, RequestStatus, RequestTransition, can_transition
from .machine import RequestStateMachine, InvalidTransitionError, PermissionDeniedError
from .ledger import RequestLedger
from .processors import get_processor
from .service import RequestReviewService, ReviewResult

__all__ = [
    "RequestType",
    "RequestStatus",
    "RequestTransition",
    "can_transition",
    "RequestStateMachine",
    "InvalidTransitionError",
    "PermissionDeniedError",
    "RequestLedger",
    "get_processor",
    "RequestReviewService",
    "ReviewResult",
]
