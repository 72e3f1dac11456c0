"""Changelog entry and tag schemas."""

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from changerawr.api.schemas.common import APIModel, Pagination


class TagResponse(APIModel):
    id: UUID
    name: str
    color: Optional[str] = None


class TagWithUsage(TagResponse):
    usage_count: int = 0


class TagCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=50)
    color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value


class TagListResponse(APIModel):
    tags: List[TagWithUsage]
    pagination: Pagination


class EntryResponse(APIModel):
    id: UUID
    title: str
    content: str
    version: Optional[str] = None
    published_at: Optional[datetime] = None
    scheduled_at: Optional[datetime] = None
    changelog_id: UUID
    created_at: datetime
    updated_at: datetime
    tags: List[TagResponse] = []


class EntryListResponse(APIModel):
    entries: List[EntryResponse]
    tags: List[TagResponse]
    pagination: Pagination


class EntryCreate(APIModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    version: Optional[str] = Field(None, max_length=100)
    tags: List[str] = []


class EntryUpdate(APIModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    version: Optional[str] = Field(None, max_length=100)
    tags: Optional[List[UUID]] = None


class StatusChange(APIModel):
    action: Literal["publish", "unpublish"]


class ScheduleChange(APIModel):
    action: Literal["schedule", "unschedule"]
    scheduled_at: Optional[datetime] = None

    @model_validator(mode="after")
    def scheduled_at_required(self):
        if self.action == "schedule" and self.scheduled_at is None:
            raise ValueError("scheduledAt is required when scheduling")
        return self
