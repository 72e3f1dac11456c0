"""Changelog request endpoints: filing, listing and admin review."""

from typing import List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, status as http_status
from sqlalchemy import inspect
from sqlalchemy.orm import Session

from changerawr.api.deps import get_db, get_current_user
from changerawr.api.schemas.requests import ChangelogRequestDetail, RequestCreate, RequestReview
from changerawr.core.audit import AuditLogger
from changerawr.core.errors import AuthorizationError
from changerawr.core.rbac import Role, require_permission
from changerawr.core.requests import RequestLedger, RequestReviewService, RequestStatus, RequestType
from changerawr.db.models import User
from changerawr.services.notifications import build_decision_context, send_request_decision

router = APIRouter(prefix="/changelog/requests", tags=["requests"])


@router.get("", response_model=List[ChangelogRequestDetail])
@require_permission("requests:list")
async def list_requests(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    project_id: Optional[UUID] = Query(None, alias="projectId"),
    status: Literal["PENDING", "APPROVED", "REJECTED", "ALL"] = "PENDING",
):
    """List requests, newest first. Non-admins only see their own."""
    return RequestLedger(db).list_requests(
        current_user,
        project_id=project_id,
        status=None if status == "ALL" else RequestStatus(status),
    )


@router.post("", response_model=ChangelogRequestDetail, status_code=http_status.HTTP_201_CREATED)
@require_permission("requests:create")
async def create_request(
    body: RequestCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    File a request against a project.

    ``targetId`` names the entry for ALLOW_PUBLISH and DELETE_ENTRY and the
    tag for DELETE_TAG. DELETE_PROJECT takes no target.
    """
    request_type = RequestType(body.type)
    queued = RequestLedger(db).open_request(request_type, body.project_id, current_user.id, body.target_id)

    AuditLogger(db, request, current_user).log(
        action="REQUEST_CREATED",
        resource_type="request",
        resource_id=queued.id,
        project_id=queued.project_id,
        details={
            "requestType": request_type.value,
            "targetId": str(body.target_id) if body.target_id else None,
        },
    )
    response = ChangelogRequestDetail.model_validate(queued)
    db.commit()
    return response


@router.get("/{request_id}", response_model=ChangelogRequestDetail)
@require_permission("requests:read")
async def get_request(
    request_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    changelog_request = RequestLedger(db).get_request(request_id)
    if current_user.role != Role.ADMIN.value and changelog_request.staff_id != current_user.id:
        raise AuthorizationError("Not allowed to view this request")
    return changelog_request


@router.patch("/{request_id}", response_model=ChangelogRequestDetail)
@require_permission("requests:approve", "requests:reject")
async def review_request(
    request_id: UUID,
    body: RequestReview,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Approve or reject a pending request. Approval applies the queued change."""
    service = RequestReviewService(db, AuditLogger(db, request, current_user))
    result = service.review(request_id, body.status, current_user, comment=body.comment)

    context = build_decision_context(result.request, result.target_title)
    if inspect(result.request).deleted:
        # Approved project deletion removed the request row with the project
        response = ChangelogRequestDetail.model_validate(result.request)
        db.commit()
    else:
        db.commit()
        db.refresh(result.request)
        response = result.request

    background_tasks.add_task(send_request_decision, context)
    return response
