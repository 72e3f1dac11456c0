from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import Field

from changerawr.api.schemas.common import APIModel


class RequestUser(APIModel):
    id: UUID
    email: str
    name: Optional[str] = None


class RequestProject(APIModel):
    id: UUID
    name: str


class RequestEntry(APIModel):
    id: UUID
    title: str


class RequestTag(APIModel):
    id: UUID
    name: str


class ChangelogRequestResponse(APIModel):
    id: UUID
    type: str
    status: str
    staff_id: UUID
    admin_id: Optional[UUID] = None
    project_id: UUID
    changelog_entry_id: Optional[UUID] = None
    changelog_tag_id: Optional[UUID] = None
    comment: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime


class ChangelogRequestDetail(ChangelogRequestResponse):
    staff: Optional[RequestUser] = None
    project: Optional[RequestProject] = None
    entry: Optional[RequestEntry] = None
    tag: Optional[RequestTag] = None


class RequestCreate(APIModel):
    type: Literal["ALLOW_PUBLISH", "DELETE_ENTRY", "DELETE_TAG", "DELETE_PROJECT"]
    project_id: UUID
    target_id: Optional[UUID] = None


class RequestReview(APIModel):
    status: Literal["APPROVED", "REJECTED"]
    comment: Optional[str] = Field(None, max_length=1000)
