"""Entry publication workflow.

Glue between the classifier, the request ledger and the applier:

    caller action → classify(role, action, policy)
        DENY            → AuthorizationError
        EXECUTE_DIRECT  → applier mutates the entry      (200 + entry)
        QUEUE_REQUEST   → ledger queues a staff request  (202 + request)

Every outcome is written to the audit log on the same session.
"""

import logging
from typing import NamedTuple, Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session

from changerawr.core.audit import AuditLogger
from changerawr.core.errors import AuthorizationError, NotFoundError
from changerawr.core.requests.ledger import RequestLedger
from changerawr.core.requests.states import RequestType
from changerawr.db.models import AuditSeverity, ChangelogEntry, ChangelogRequest, Project

from .applier import PublicationApplier
from .classifier import Decision, EntryAction, classify
from .policy import PublicationPolicy

logger = logging.getLogger(__name__)


class WorkflowOutcome(NamedTuple):
    """Result of a workflow call: exactly one of entry/request is set."""
    decision: Decision
    entry: Optional[ChangelogEntry] = None
    request: Optional[ChangelogRequest] = None

    @property
    def queued(self) -> bool:
        return self.decision is Decision.QUEUE_REQUEST

    @property
    def status_code(self) -> int:
        return 202 if self.queued else 200


REQUEST_TYPE_FOR_ACTION = {
    EntryAction.PUBLISH: RequestType.ALLOW_PUBLISH,
    EntryAction.DELETE: RequestType.DELETE_ENTRY,
}

AUDIT_ACTION_FOR_ACTION = {
    EntryAction.PUBLISH: "ENTRY_PUBLISHED",
    EntryAction.UNPUBLISH: "ENTRY_UNPUBLISHED",
    EntryAction.DELETE: "ENTRY_DELETED",
}


class PublicationWorkflow:
    """Runs publish, unpublish and delete requests for a caller."""

    def __init__(self, db: Session, audit: Optional[AuditLogger] = None, *,
                 ledger: Optional[RequestLedger] = None,
                 applier: Optional[PublicationApplier] = None):
        self.db = db
        self.audit = audit
        self.ledger = ledger or RequestLedger(db)
        self.applier = applier or PublicationApplier(db)

    def change_status(self, project_id: UUID, entry_id: UUID,
                      action: Union[EntryAction, str], user) -> WorkflowOutcome:
        """Publish or unpublish an entry on behalf of ``user``."""
        action = EntryAction(action)
        if action is EntryAction.DELETE:
            raise ValueError("Use delete() for entry deletion")
        return self._run(project_id, entry_id, action, user)

    def delete(self, project_id: UUID, entry_id: UUID, user) -> WorkflowOutcome:
        """Delete an entry on behalf of ``user``."""
        return self._run(project_id, entry_id, EntryAction.DELETE, user)

    def _run(self, project_id: UUID, entry_id: UUID, action: EntryAction, user) -> WorkflowOutcome:
        project = self.db.query(Project).filter(Project.id == project_id).first()
        if project is None:
            raise NotFoundError("Project not found")

        policy = PublicationPolicy.from_project(project)
        decision, reason = classify(user.role, action, policy)

        if decision is Decision.DENY:
            logger.info(f"Denied {action.value} on entry {entry_id} for {user.role} user {user.id}")
            raise AuthorizationError(reason)

        # 404 before anything is queued or applied
        entry = self.applier.get_entry(entry_id, project.id)
        audit = self.audit or AuditLogger(self.db, user=user)

        if decision is Decision.QUEUE_REQUEST:
            request_type = REQUEST_TYPE_FOR_ACTION[action]
            request = self.ledger.submit_request(request_type, entry.id, project.id, user.id)
            audit.log(
                action="REQUEST_CREATED",
                resource_type="request",
                resource_id=request.id,
                project_id=project.id,
                details={"requestType": request_type.value, "entryId": str(entry.id)},
            )
            return WorkflowOutcome(decision, request=request)

        if action is EntryAction.PUBLISH:
            entry = self.applier.publish(entry.id, project.id)
        elif action is EntryAction.UNPUBLISH:
            entry = self.applier.unpublish(entry.id, project.id)
        else:
            entry = self.applier.delete_entry(entry.id, project.id)

        audit.log(
            action=AUDIT_ACTION_FOR_ACTION[action],
            resource_type="entry",
            resource_id=entry.id,
            project_id=project.id,
            details={"title": entry.title},
            severity=AuditSeverity.WARNING if action is EntryAction.DELETE else AuditSeverity.INFO,
        )
        return WorkflowOutcome(decision, entry=entry)
