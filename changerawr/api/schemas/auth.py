from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from changerawr.api.schemas.common import APIModel


class UserCreate(APIModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: Optional[str] = None
    role: Literal["ADMIN", "STAFF", "VIEWER"] = "STAFF"


class SetupRequest(APIModel):
    """First-run administrator account."""
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: Optional[str] = None


class Token(BaseModel):
    """OAuth2 token response. Field names stay snake_case for OAuth2 clients."""
    access_token: str
    token_type: str = "bearer"


class UserResponse(APIModel):
    id: UUID
    email: str
    name: Optional[str] = None
    role: str
    is_active: bool
    created_at: datetime
    last_login: Optional[datetime] = None
