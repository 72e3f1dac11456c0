"""Request ledger.

Persists queued staff requests and keeps at most one PENDING request per
target. The duplicate check and the insert run on the same session and
transaction. Partial unique indexes over PENDING rows catch whatever a
concurrent writer slips past the check:

    entry requests   - (changelog_entry_id, pending_key)
    tag requests     - (changelog_tag_id, type)
    project deletion - (project_id, type)

Duplicate scope decides the pending_key written for entry requests:
    "entry" - any pending request blocks another for the same entry
    "type"  - only a pending request of the same type blocks
"""

import logging
from typing import Optional, List
from uuid import UUID

from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from changerawr.core.config import get_settings
from changerawr.core.errors import DuplicateRequestError, NotFoundError, ValidationError
from changerawr.core.rbac.roles import Role
from changerawr.db.models import Changelog, ChangelogEntry, ChangelogRequest, ChangelogTag, Project

from .states import RequestType, RequestStatus

logger = logging.getLogger(__name__)

DUPLICATE_SCOPES = ("entry", "type")

# pending_key shared by every request type under the "entry" scope
ENTRY_SCOPE_KEY = "ENTRY"


class RequestLedger:
    """Queue of staff requests awaiting admin review."""

    def __init__(self, db: Session, duplicate_scope: Optional[str] = None):
        self.db = db
        self.duplicate_scope = duplicate_scope or get_settings().request_duplicate_scope
        if self.duplicate_scope not in DUPLICATE_SCOPES:
            raise ValueError(f"Unknown duplicate scope: {self.duplicate_scope}")

    def pending_key(self, request_type: RequestType) -> str:
        """Value the pending-entry unique index compares for this scope."""
        if self.duplicate_scope == "entry":
            return ENTRY_SCOPE_KEY
        return RequestType(request_type).value

    def find_pending(self, request_type: RequestType, *, entry_id: Optional[UUID] = None,
                     tag_id: Optional[UUID] = None,
                     project_id: Optional[UUID] = None) -> Optional[ChangelogRequest]:
        """Return the pending request that would block a new one, if any."""
        request_type = RequestType(request_type)
        conditions = [ChangelogRequest.status == RequestStatus.PENDING.value]
        if entry_id is not None:
            conditions.append(ChangelogRequest.changelog_entry_id == entry_id)
        elif tag_id is not None:
            conditions.append(ChangelogRequest.changelog_tag_id == tag_id)
        elif request_type is RequestType.DELETE_PROJECT and project_id is not None:
            conditions.append(ChangelogRequest.project_id == project_id)
        else:
            return None

        if self.duplicate_scope == "type" or entry_id is None:
            conditions.append(ChangelogRequest.type == request_type.value)

        return self.db.query(ChangelogRequest).filter(and_(*conditions)).first()

    def submit_request(
        self,
        request_type: RequestType,
        entry_id: Optional[UUID],
        project_id: UUID,
        staff_id: UUID,
        *,
        tag_id: Optional[UUID] = None,
    ) -> ChangelogRequest:
        """
        Queue a new PENDING request.

        The insert runs in a savepoint, so losing a race to a concurrent
        writer leaves the rest of the caller's transaction intact.

        Raises:
            DuplicateRequestError: If a blocking request is already pending
        """
        request_type = RequestType(request_type)

        existing = self.find_pending(request_type, entry_id=entry_id, tag_id=tag_id, project_id=project_id)
        if existing is not None:
            raise DuplicateRequestError(
                _duplicate_message(request_type, existing),
                existing_request_id=existing.id,
            )

        request = ChangelogRequest(
            type=request_type.value,
            status=RequestStatus.PENDING.value,
            staff_id=staff_id,
            project_id=project_id,
            changelog_entry_id=entry_id,
            changelog_tag_id=tag_id,
            pending_key=self.pending_key(request_type),
        )
        try:
            with self.db.begin_nested():
                self.db.add(request)
        except IntegrityError:
            logger.warning(f"Concurrent {request_type.value} request for project {project_id} rejected")
            raise DuplicateRequestError(_duplicate_message(request_type, None))

        logger.info(f"Queued {request_type.value} request {request.id} by user {staff_id}")
        return request

    def open_request(
        self,
        request_type: RequestType,
        project_id: UUID,
        staff_id: UUID,
        target_id: Optional[UUID] = None,
    ) -> ChangelogRequest:
        """
        Resolve the target of a request filed directly by a user and queue it.

        ``target_id`` names the entry for ALLOW_PUBLISH and DELETE_ENTRY and
        the tag for DELETE_TAG. DELETE_PROJECT targets the project itself.

        Raises:
            NotFoundError: If the project or target does not exist
            ValidationError: If the request type needs a target and none was given
            DuplicateRequestError: If a blocking request is already pending
        """
        request_type = RequestType(request_type)
        project = self.db.query(Project).filter(Project.id == project_id).first()
        if project is None:
            raise NotFoundError("Project not found")

        if request_type is RequestType.DELETE_PROJECT:
            return self.submit_request(request_type, None, project.id, staff_id)

        if target_id is None:
            raise ValidationError(
                "Validation failed",
                details=[{"field": "targetId", "message": f"required for {request_type.value}"}],
            )

        if request_type is RequestType.DELETE_TAG:
            tag = self.db.query(ChangelogTag).filter(ChangelogTag.id == target_id).first()
            if tag is None:
                raise NotFoundError("Tag not found")
            return self.submit_request(request_type, None, project.id, staff_id, tag_id=tag.id)

        entry = (
            self.db.query(ChangelogEntry)
            .join(Changelog, Changelog.id == ChangelogEntry.changelog_id)
            .filter(and_(ChangelogEntry.id == target_id, Changelog.project_id == project.id))
            .first()
        )
        if entry is None:
            raise NotFoundError("Entry not found")
        return self.submit_request(request_type, entry.id, project.id, staff_id)

    def get_request(self, request_id: UUID, *, for_update: bool = False) -> ChangelogRequest:
        query = self.db.query(ChangelogRequest).filter(ChangelogRequest.id == request_id)
        if for_update:
            query = query.with_for_update()
        request = query.first()
        if request is None:
            raise NotFoundError("Request not found")
        return request

    def list_requests(
        self,
        user,
        *,
        project_id: Optional[UUID] = None,
        status: Optional[RequestStatus] = RequestStatus.PENDING,
    ) -> List[ChangelogRequest]:
        """
        List requests visible to a user, newest first.

        Admins see every request; everyone else only their own.
        """
        query = self.db.query(ChangelogRequest)
        if status is not None:
            query = query.filter(ChangelogRequest.status == RequestStatus(status).value)
        if project_id is not None:
            query = query.filter(ChangelogRequest.project_id == project_id)
        if user.role != Role.ADMIN.value:
            query = query.filter(ChangelogRequest.staff_id == user.id)
        return query.order_by(ChangelogRequest.created_at.desc()).all()


def _duplicate_message(request_type: RequestType, existing: Optional[ChangelogRequest]) -> str:
    if request_type is RequestType.DELETE_TAG:
        return "A deletion request for this tag is already pending"
    if request_type is RequestType.DELETE_PROJECT:
        return "A deletion request for this project is already pending"
    if existing is not None and existing.type != request_type.value:
        return f"A {existing.type} request for this entry is already pending"
    if request_type is RequestType.ALLOW_PUBLISH:
        return "A publish request for this entry is already pending"
    return "A deletion request for this entry is already pending"
