"""Processors that apply an approved request's change.

Each processor runs inside the review transaction; raising aborts the
whole review.
"""

import logging
from typing import Callable, Dict

from sqlalchemy.orm import Session

from changerawr.core.errors import NotFoundError
from changerawr.core.publication.applier import PublicationApplier
from changerawr.db.models import ChangelogRequest, ChangelogTag, Project

from .states import RequestType

logger = logging.getLogger(__name__)

Processor = Callable[[Session, ChangelogRequest], None]


def process_allow_publish(db: Session, request: ChangelogRequest) -> None:
    if request.changelog_entry_id is None:
        raise NotFoundError("Entry not found")
    PublicationApplier(db).publish(request.changelog_entry_id, request.project_id)


def process_delete_entry(db: Session, request: ChangelogRequest) -> None:
    if request.changelog_entry_id is None:
        raise NotFoundError("Entry not found")
    PublicationApplier(db).delete_entry(request.changelog_entry_id, request.project_id)


def process_delete_tag(db: Session, request: ChangelogRequest) -> None:
    tag = None
    if request.changelog_tag_id is not None:
        tag = db.query(ChangelogTag).filter(ChangelogTag.id == request.changelog_tag_id).first()
    if tag is None:
        raise NotFoundError("Tag not found")
    db.delete(tag)
    db.flush()
    logger.info(f"Deleted tag {tag.name}")


def process_delete_project(db: Session, request: ChangelogRequest) -> None:
    """Remove the project together with everything filed under it."""
    project = db.query(Project).filter(Project.id == request.project_id).first()
    if project is None:
        raise NotFoundError("Project not found")
    db.delete(project)
    db.flush()
    logger.info(f"Deleted project {project.slug}")


PROCESSORS: Dict[RequestType, Processor] = {
    RequestType.ALLOW_PUBLISH: process_allow_publish,
    RequestType.DELETE_ENTRY: process_delete_entry,
    RequestType.DELETE_TAG: process_delete_tag,
    RequestType.DELETE_PROJECT: process_delete_project,
}


def get_processor(request_type: RequestType) -> Processor:
    return PROCESSORS[RequestType(request_type)]
