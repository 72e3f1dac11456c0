"""Project endpoints, including the publication policy settings."""

import uuid
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from slugify import slugify
from sqlalchemy.orm import Session

from changerawr.api.deps import get_db, get_current_user
from changerawr.api.schemas.projects import (
    ProjectCreate,
    ProjectResponse,
    ProjectSettings,
    ProjectSettingsUpdate,
)
from changerawr.core.audit import AuditLogger
from changerawr.core.errors import NotFoundError
from changerawr.core.rbac import require_permission
from changerawr.db.models import Changelog, Project, User

router = APIRouter(prefix="/projects", tags=["projects"])


def get_project_or_404(db: Session, project_id: UUID) -> Project:
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise NotFoundError("Project not found")
    return project


def get_changelog_or_404(db: Session, project_id: UUID) -> Changelog:
    changelog = db.query(Changelog).filter(Changelog.project_id == project_id).first()
    if not changelog:
        raise NotFoundError("Changelog not found")
    return changelog


@router.get("", response_model=List[ProjectResponse])
@require_permission("projects:list")
async def list_projects(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return db.query(Project).order_by(Project.created_at.desc()).all()


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
@require_permission("projects:create")
async def create_project(
    body: ProjectCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a project together with its changelog."""
    slug = slugify(body.slug or body.name)[:100]
    if db.query(Project).filter(Project.slug == slug).first():
        # Add random suffix if slug exists
        slug = f"{slug[:93]}-{uuid.uuid4().hex[:6]}"

    project = Project(
        name=body.name,
        slug=slug,
        is_public=body.is_public,
        require_approval=body.require_approval,
        allow_auto_publish=body.allow_auto_publish,
        default_tags=body.default_tags,
    )
    project.changelog = Changelog()
    db.add(project)
    db.flush()

    AuditLogger(db, request, current_user).log(
        action="PROJECT_CREATED",
        resource_type="project",
        resource_id=project.id,
        project_id=project.id,
        details={"name": project.name, "slug": project.slug},
    )
    db.commit()
    db.refresh(project)
    return project


@router.get("/{project_id}", response_model=ProjectResponse)
@require_permission("projects:read")
async def get_project(
    project_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return get_project_or_404(db, project_id)


@router.get("/{project_id}/settings", response_model=ProjectSettings)
@require_permission("projects:read")
async def get_project_settings(
    project_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return get_project_or_404(db, project_id)


@router.patch("/{project_id}/settings", response_model=ProjectSettings)
@require_permission("projects:configure")
async def update_project_settings(
    project_id: UUID,
    body: ProjectSettingsUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update a project's name, visibility and publication policy."""
    project = get_project_or_404(db, project_id)

    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    old_values = {field: getattr(project, field) for field in changes}
    for field, value in changes.items():
        setattr(project, field, value)

    AuditLogger(db, request, current_user).log(
        action="PROJECT_SETTINGS_UPDATED",
        resource_type="project",
        resource_id=project.id,
        project_id=project.id,
        details={"old": old_values, "new": changes},
    )
    db.commit()
    db.refresh(project)
    return project
