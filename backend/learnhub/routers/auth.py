"""Auth router — registration, login, and user info."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from learnhub.config import settings
from learnhub.database import get_db
from learnhub.errors import ConflictError, UnauthorizedError, ValidationError
from learnhub.middleware.auth import (
    hash_password,
    verify_password,
    create_access_token,
    get_current_user,
)
from learnhub.middleware.rate_limit import limiter
from learnhub.models.user import User
from learnhub.schemas.auth import RegisterRequest, LoginRequest, TokenResponse, UserResponse

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        role=user.role,
        display_name=user.display_name,
        avatar_url=user.avatar_url,
        created_at=user.created_at.isoformat(),
    )


@router.post("/register", response_model=UserResponse, status_code=201)
@limiter.limit(settings.AUTH_RATE_LIMIT)
def register(request: Request, req: RegisterRequest, db: Session = Depends(get_db)):
    """Register a new user. Emails listed in ADMIN_EMAILS get the admin role."""
    email = req.email.strip().lower()
    if not email or not req.password:
        raise ValidationError("Missing email or password", "Email and password are required.")

    existing = db.query(User).filter(User.email == email).first()
    if existing:
        raise ConflictError(f"Email {email} already registered", "Email already registered.")

    user = User(
        email=email,
        password_hash=hash_password(req.password),
        role="admin" if email in settings.admin_emails else "student",
        # Fall back to the mailbox name like the OAuth profile sync did.
        display_name=req.display_name.strip() or email.split("@")[0],
        avatar_url=req.avatar_url,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return _user_to_response(user)


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.AUTH_RATE_LIMIT)
def login(request: Request, req: LoginRequest, db: Session = Depends(get_db)):
    """Login and get JWT token."""
    user = db.query(User).filter(User.email == req.email.strip().lower()).first()
    if not user or not verify_password(req.password, user.password_hash):
        raise UnauthorizedError("Bad credentials", "Invalid email or password.")

    token = create_access_token({"sub": user.id})
    return TokenResponse(access_token=token)


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """Get current user info."""
    return _user_to_response(current_user)
