"""User management endpoints (admin only)."""

from typing import List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from changerawr.api.deps import get_db, get_current_user
from changerawr.api.schemas.auth import UserCreate, UserResponse
from changerawr.core.audit import AuditLogger
from changerawr.core.errors import ConflictError
from changerawr.core.rbac import require_permission
from changerawr.core.security import get_password_hash
from changerawr.db.models import User

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[UserResponse])
@require_permission("users:list")
async def list_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return db.query(User).order_by(User.created_at.asc()).all()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@require_permission("users:create")
async def create_user(
    body: UserCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a user with a fixed role."""
    email = body.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise ConflictError("Email already registered")

    user = User(
        email=email,
        password_hash=get_password_hash(body.password),
        name=body.name,
        role=body.role,
    )
    db.add(user)
    db.flush()

    AuditLogger(db, request, current_user).log(
        action="USER_CREATED",
        resource_type="user",
        resource_id=user.id,
        details={"email": user.email, "role": user.role},
    )
    db.commit()
    db.refresh(user)
    return user
