"""Changelog entry endpoints.

PATCH and DELETE on an entry go through the publication workflow: the
caller's role and the project's policy decide whether the change happens
now (200 + entry) or is queued for an admin (202 + request).
"""

from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from changerawr.api.deps import get_db, get_current_user
from changerawr.api.routers.projects import get_changelog_or_404, get_project_or_404
from changerawr.api.schemas.changelog import (
    EntryCreate,
    EntryListResponse,
    EntryResponse,
    EntryUpdate,
    ScheduleChange,
    StatusChange,
    TagResponse,
)
from changerawr.api.schemas.common import Pagination
from changerawr.api.schemas.requests import ChangelogRequestResponse
from changerawr.core.audit import AuditLogger
from changerawr.core.errors import ValidationError
from changerawr.core.publication.applier import PublicationApplier
from changerawr.core.publication.scheduling import SchedulingService
from changerawr.core.publication.workflow import PublicationWorkflow, WorkflowOutcome
from changerawr.core.rbac import require_permission
from changerawr.db.models import ChangelogEntry, ChangelogTag, User, entry_tags

router = APIRouter(prefix="/projects/{project_id}/changelog", tags=["changelog"])


def to_json(model: BaseModel, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=model.model_dump(mode="json", by_alias=True))


def outcome_response(outcome: WorkflowOutcome) -> JSONResponse:
    if outcome.queued:
        payload = ChangelogRequestResponse.model_validate(outcome.request)
    else:
        payload = EntryResponse.model_validate(outcome.entry)
    return to_json(payload, outcome.status_code)


def resolve_tag_names(db: Session, names: List[str]) -> List[ChangelogTag]:
    """Connect tags by name (case-insensitive) or create them, dropping duplicates."""
    resolved = {}
    for raw in names:
        name = raw.strip()
        key = name.lower()
        if not name or key in resolved:
            continue
        tag = db.query(ChangelogTag).filter(func.lower(ChangelogTag.name) == key).first()
        if tag is None:
            tag = ChangelogTag(name=name)
            db.add(tag)
            db.flush()
        resolved[key] = tag
    return list(resolved.values())


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


@router.get("", response_model=EntryListResponse)
@require_permission("entries:list")
async def list_entries(
    project_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    tag: Optional[str] = None,
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
):
    """List a project's entries, newest first."""
    changelog = get_changelog_or_404(db, project_id)

    query = db.query(ChangelogEntry).filter(ChangelogEntry.changelog_id == changelog.id)

    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(ChangelogEntry.title.ilike(pattern), ChangelogEntry.content.ilike(pattern)))

    if tag:
        query = query.filter(ChangelogEntry.tags.any(ChangelogTag.name == tag))

    if start_date and end_date:
        query = query.filter(
            and_(
                ChangelogEntry.created_at >= to_naive_utc(start_date),
                ChangelogEntry.created_at <= to_naive_utc(end_date),
            )
        )

    total = query.count()
    entries = (
        query.order_by(ChangelogEntry.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    tags_in_use = (
        db.query(ChangelogTag)
        .join(entry_tags, entry_tags.c.tag_id == ChangelogTag.id)
        .join(ChangelogEntry, ChangelogEntry.id == entry_tags.c.entry_id)
        .filter(ChangelogEntry.changelog_id == changelog.id)
        .distinct()
        .order_by(ChangelogTag.name)
        .all()
    )

    return EntryListResponse(
        entries=[EntryResponse.model_validate(e) for e in entries],
        tags=[TagResponse.model_validate(t) for t in tags_in_use],
        pagination=Pagination.create(page=page, limit=limit, total=total),
    )


@router.post("", response_model=EntryResponse, status_code=status.HTTP_201_CREATED)
@require_permission("entries:create")
async def create_entry(
    project_id: UUID,
    body: EntryCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a draft entry."""
    changelog = get_changelog_or_404(db, project_id)

    entry = ChangelogEntry(
        changelog_id=changelog.id,
        title=body.title,
        content=body.content,
        version=body.version,
    )
    entry.tags = resolve_tag_names(db, body.tags)
    db.add(entry)
    db.flush()

    AuditLogger(db, request, current_user).log(
        action="ENTRY_CREATED",
        resource_type="entry",
        resource_id=entry.id,
        project_id=project_id,
        details={"title": entry.title, "tags": [t.name for t in entry.tags]},
    )
    db.commit()
    db.refresh(entry)
    return entry


@router.get("/{entry_id}", response_model=EntryResponse)
@require_permission("entries:read")
async def get_entry(
    project_id: UUID,
    entry_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return PublicationApplier(db).get_entry(entry_id, project_id)


@router.put("/{entry_id}", response_model=EntryResponse)
@require_permission("entries:update")
async def update_entry(
    project_id: UUID,
    entry_id: UUID,
    body: EntryUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update an entry's text, version or tags. Publication state is untouched."""
    entry = PublicationApplier(db).get_entry(entry_id, project_id)

    changes = body.model_dump(exclude_unset=True, exclude={"tags"})
    for field, value in changes.items():
        if value is not None:
            setattr(entry, field, value)

    if body.tags is not None:
        wanted = set(body.tags)
        tags = db.query(ChangelogTag).filter(ChangelogTag.id.in_(wanted)).all() if wanted else []
        if len(tags) != len(wanted):
            raise ValidationError(
                "Unknown tag",
                details=[{"field": "tags", "message": "one or more tags do not exist"}],
            )
        entry.tags = tags

    AuditLogger(db, request, current_user).log(
        action="ENTRY_UPDATED",
        resource_type="entry",
        resource_id=entry.id,
        project_id=project_id,
        details={"fields": sorted(body.model_dump(exclude_unset=True).keys())},
    )
    db.commit()
    db.refresh(entry)
    return entry


@router.patch("/{entry_id}")
async def change_entry_status(
    project_id: UUID,
    entry_id: UUID,
    body: StatusChange,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Publish or unpublish an entry; staff publishes may be queued for approval."""
    workflow = PublicationWorkflow(db, AuditLogger(db, request, current_user))
    outcome = workflow.change_status(project_id, entry_id, body.action, current_user)
    response = outcome_response(outcome)
    db.commit()
    return response


@router.delete("/{entry_id}")
async def delete_entry(
    project_id: UUID,
    entry_id: UUID,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete an entry; staff deletions are queued for approval."""
    workflow = PublicationWorkflow(db, AuditLogger(db, request, current_user))
    outcome = workflow.delete(project_id, entry_id, current_user)
    # Rendered before commit: a deleted entry cannot be reloaded afterwards
    response = outcome_response(outcome)
    db.commit()
    return response


@router.post("/{entry_id}/schedule", response_model=EntryResponse)
async def schedule_entry(
    project_id: UUID,
    entry_id: UUID,
    body: ScheduleChange,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Schedule an entry for automatic publication, or cancel the schedule."""
    get_project_or_404(db, project_id)
    service = SchedulingService(db, AuditLogger(db, request, current_user))

    if body.action == "schedule":
        entry = service.schedule(project_id, entry_id, current_user, to_naive_utc(body.scheduled_at))
    else:
        entry = service.unschedule(project_id, entry_id, current_user)

    db.commit()
    db.refresh(entry)
    return entry
