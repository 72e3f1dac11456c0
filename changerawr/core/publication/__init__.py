"""Entry publication: policy, classifier and state transition applier."""

from .policy import PublicationPolicy
from .classifier import EntryAction, Decision, Classification, classify, can_schedule
from .applier import PublicationApplier

__all__ = [
    "PublicationPolicy",
    "EntryAction",
    "Decision",
    "Classification",
    "classify",
    "can_schedule",
    "PublicationApplier",
]
