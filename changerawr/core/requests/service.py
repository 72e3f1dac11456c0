"""Request review service.

Moves a PENDING request to APPROVED or REJECTED, applies the queued change
on approval and records the decision in the audit log. Everything happens
on the caller's session; the caller commits.
"""

import logging
from datetime import datetime
from typing import NamedTuple, Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session

from changerawr.core.audit import AuditLogger
from changerawr.core.errors import ValidationError
from changerawr.core.rbac.roles import permissions_for_role
from changerawr.db.models import ChangelogRequest, AuditSeverity

from .ledger import RequestLedger
from .machine import RequestStateMachine
from .processors import get_processor
from .states import RequestStatus, RequestType, TRANSITION_FOR_STATUS

logger = logging.getLogger(__name__)


class ReviewResult(NamedTuple):
    request: ChangelogRequest
    target_title: Optional[str] = None


class RequestReviewService:
    """Admin review of queued changelog requests."""

    def __init__(self, db: Session, audit: Optional[AuditLogger] = None):
        self.db = db
        self.ledger = RequestLedger(db)
        self.audit = audit

    def review(
        self,
        request_id: UUID,
        status: Union[RequestStatus, str],
        admin,
        *,
        comment: Optional[str] = None,
    ) -> ReviewResult:
        """
        Approve or reject a pending request.

        Raises:
            ValidationError: If status is not a review outcome
            NotFoundError: If the request, or the approved change's target, is missing
            InvalidTransitionError: If the request is no longer pending
            PermissionDeniedError: If the reviewer lacks the permission
        """
        status = RequestStatus(status)
        transition = TRANSITION_FOR_STATUS.get(status)
        if transition is None:
            raise ValidationError(
                "Invalid review status",
                details=[{"field": "status", "message": "must be APPROVED or REJECTED"}],
            )

        request = self.ledger.get_request(request_id, for_update=True)

        machine = RequestStateMachine(
            RequestStatus(request.status),
            user_permissions=permissions_for_role(admin.role),
        )
        new_state = machine.transition(transition)

        # Snapshot before the processor can remove the target
        target_title = None
        if request.entry is not None:
            target_title = request.entry.title
        elif request.tag is not None:
            target_title = request.tag.name
        elif request.type == RequestType.DELETE_PROJECT.value:
            target_title = request.project.name

        details = {
            "requestType": request.type,
            "entryId": str(request.changelog_entry_id) if request.changelog_entry_id else None,
            "tagId": str(request.changelog_tag_id) if request.changelog_tag_id else None,
            "staffId": str(request.staff_id),
            "title": target_title,
        }

        request.status = new_state.value
        request.admin_id = admin.id
        request.reviewed_at = datetime.utcnow()
        if comment:
            request.comment = comment

        # Project deletion removes this request row along with the project
        if new_state is RequestStatus.APPROVED:
            get_processor(RequestType(request.type))(self.db, request)
        self.db.flush()

        severity = AuditSeverity.INFO
        if new_state is RequestStatus.APPROVED and request.type != RequestType.ALLOW_PUBLISH.value:
            severity = AuditSeverity.WARNING

        audit = self.audit or AuditLogger(self.db, user=admin)
        audit.log(
            action=f"REQUEST_{new_state.value}",
            resource_type="request",
            resource_id=request.id,
            project_id=request.project_id,
            details=details,
            severity=severity,
        )

        logger.info(f"Request {request.id} {new_state.value.lower()} by {admin.id}")
        return ReviewResult(request, target_title)
