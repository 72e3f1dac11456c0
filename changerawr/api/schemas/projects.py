from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from changerawr.api.schemas.common import APIModel


class ProjectCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=100)
    is_public: bool = False
    require_approval: bool = True
    allow_auto_publish: bool = False
    default_tags: List[str] = []


class ProjectResponse(APIModel):
    id: UUID
    name: str
    slug: str
    is_public: bool
    require_approval: bool
    allow_auto_publish: bool
    default_tags: List[str]
    created_at: datetime
    updated_at: datetime


class ProjectSettings(APIModel):
    id: UUID
    name: str
    is_public: bool
    require_approval: bool
    allow_auto_publish: bool
    default_tags: List[str]


class ProjectSettingsUpdate(APIModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    is_public: Optional[bool] = None
    require_approval: Optional[bool] = None
    allow_auto_publish: Optional[bool] = None
    default_tags: Optional[List[str]] = None
