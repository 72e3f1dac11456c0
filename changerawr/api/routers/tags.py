"""Changelog tag endpoints."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from changerawr.api.deps import get_db, get_current_user
from changerawr.api.routers.changelog import to_json
from changerawr.api.routers.projects import get_changelog_or_404, get_project_or_404
from changerawr.api.schemas.changelog import TagCreate, TagListResponse, TagResponse, TagWithUsage
from changerawr.api.schemas.common import Pagination
from changerawr.api.schemas.requests import ChangelogRequestResponse
from changerawr.core.audit import AuditLogger
from changerawr.core.errors import AuthorizationError, NotFoundError
from changerawr.core.rbac import Role, require_permission
from changerawr.core.requests import RequestLedger, RequestType
from changerawr.db.models import AuditSeverity, ChangelogEntry, ChangelogTag, User, entry_tags

router = APIRouter(prefix="/projects/{project_id}/changelog/tags", tags=["tags"])


@router.get("", response_model=TagListResponse)
@require_permission("tags:list")
async def list_tags(
    project_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    include_usage: bool = Query(False, alias="includeUsage"),
):
    """List the tags used by a project's entries."""
    changelog = get_changelog_or_404(db, project_id)

    usage = func.count(entry_tags.c.entry_id).label("usage_count")
    query = (
        db.query(ChangelogTag, usage)
        .join(entry_tags, entry_tags.c.tag_id == ChangelogTag.id)
        .join(ChangelogEntry, ChangelogEntry.id == entry_tags.c.entry_id)
        .filter(ChangelogEntry.changelog_id == changelog.id)
        .group_by(ChangelogTag.id)
    )
    if search:
        query = query.filter(ChangelogTag.name.ilike(f"%{search}%"))

    total = query.count()
    rows = query.order_by(ChangelogTag.name).offset((page - 1) * limit).limit(limit).all()

    tags = []
    for tag, count in rows:
        item = TagWithUsage.model_validate(tag)
        item.usage_count = count if include_usage else 0
        tags.append(item)

    return TagListResponse(tags=tags, pagination=Pagination.create(page=page, limit=limit, total=total))


@router.post("", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
@require_permission("tags:create")
async def create_tag(
    project_id: UUID,
    body: TagCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a tag, or return the existing one with the same name (200)."""
    get_project_or_404(db, project_id)

    existing = db.query(ChangelogTag).filter(func.lower(ChangelogTag.name) == body.name.lower()).first()
    if existing:
        return to_json(TagResponse.model_validate(existing))

    tag = ChangelogTag(name=body.name, color=body.color)
    db.add(tag)
    db.flush()

    AuditLogger(db, request, current_user).log(
        action="TAG_CREATED",
        resource_type="tag",
        resource_id=tag.id,
        project_id=project_id,
        details={"name": tag.name, "color": tag.color},
    )
    db.commit()
    db.refresh(tag)
    return tag


@router.delete("/{tag_id}")
async def delete_tag(
    project_id: UUID,
    tag_id: UUID,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete a tag. Admins delete directly; staff deletions are queued for approval."""
    get_project_or_404(db, project_id)

    if current_user.role not in (Role.ADMIN.value, Role.STAFF.value):
        raise AuthorizationError("Viewers cannot delete tags")

    tag = db.query(ChangelogTag).filter(ChangelogTag.id == tag_id).first()
    if not tag:
        raise NotFoundError("Tag not found")

    audit = AuditLogger(db, request, current_user)

    if current_user.role == Role.STAFF.value:
        queued = RequestLedger(db).submit_request(
            RequestType.DELETE_TAG, None, project_id, current_user.id, tag_id=tag.id
        )
        audit.log(
            action="REQUEST_CREATED",
            resource_type="request",
            resource_id=queued.id,
            project_id=project_id,
            details={"requestType": RequestType.DELETE_TAG.value, "tagId": str(tag.id)},
        )
        response = to_json(ChangelogRequestResponse.model_validate(queued), status.HTTP_202_ACCEPTED)
        db.commit()
        return response

    response = to_json(TagResponse.model_validate(tag))
    db.delete(tag)
    audit.log(
        action="TAG_DELETED",
        resource_type="tag",
        resource_id=tag_id,
        project_id=project_id,
        details={"name": tag.name},
        severity=AuditSeverity.WARNING,
    )
    db.commit()
    return response
