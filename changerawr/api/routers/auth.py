from datetime import datetime

from fastapi import APIRouter, Depends, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from changerawr.api.deps import get_db, get_current_user
from changerawr.api.schemas.auth import SetupRequest, Token, UserResponse
from changerawr.core.audit import AuditLogger
from changerawr.core.errors import AuthenticationError, AuthorizationError, ConflictError
from changerawr.core.rbac import Role
from changerawr.core.security import verify_password, get_password_hash, create_access_token
from changerawr.db.models import AuditSeverity, User

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=Token)
def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    """Login and get an access token."""
    user = db.query(User).filter(User.email == form_data.username.lower()).first()

    if not user or not verify_password(form_data.password, user.password_hash):
        AuditLogger(db, request, user).log(
            action="LOGIN_FAILED",
            resource_type="user",
            resource_id=user.id if user else None,
            details={"email": form_data.username},
            severity=AuditSeverity.CRITICAL,
        )
        db.commit()
        raise AuthenticationError("Incorrect email or password")

    if not user.is_active:
        raise AuthorizationError("Inactive user")

    user.last_login = datetime.utcnow()
    db.commit()

    return Token(access_token=create_access_token(user.id))


@router.post("/setup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def setup(body: SetupRequest, request: Request, db: Session = Depends(get_db)):
    """Create the first administrator. Only allowed while no user exists."""
    if db.query(User).first() is not None:
        raise ConflictError("Setup has already been completed")

    user = User(
        email=body.email.lower(),
        password_hash=get_password_hash(body.password),
        name=body.name,
        role=Role.ADMIN.value,
    )
    db.add(user)
    db.flush()

    AuditLogger(db, request, user).log(action="SETUP_COMPLETED", resource_type="user", resource_id=user.id)
    db.commit()
    db.refresh(user)
    return user


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """Get current user info."""
    return current_user
