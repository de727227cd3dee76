"""JWT authentication middleware and dependencies."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from learnhub.config import settings
from learnhub.database import get_db
from learnhub.errors import ForbiddenError, UnauthorizedError, ValidationError
from learnhub.models.user import User

# auto_error=False so anonymous visitors reach the public catalog views.
security = HTTPBearer(auto_error=False)

# bcrypt refuses longer inputs.
MAX_PASSWORD_BYTES = 72


def _password_bytes(password: str) -> bytes:
    pwd_bytes = password.encode("utf-8")
    if len(pwd_bytes) > MAX_PASSWORD_BYTES:
        raise ValidationError(
            f"Password of {len(pwd_bytes)} bytes exceeds {MAX_PASSWORD_BYTES}",
            f"Password must be at most {MAX_PASSWORD_BYTES} bytes long.",
        )
    return pwd_bytes


def hash_password(password: str) -> str:
    """Hash a password using bcrypt directly (passlib is broken with bcrypt>=4.1)."""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a bcrypt hash."""
    return bcrypt.checkpw(
        _password_bytes(plain_password),
        hashed_password.encode("utf-8"),
    )


def create_access_token(data: dict) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except JWTError:
        raise UnauthorizedError("Invalid or expired token", "Your session has expired. Please log in again.")


def _user_from_credentials(credentials: HTTPAuthorizationCredentials, db: Session) -> User:
    payload = decode_token(credentials.credentials)
    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Invalid token payload")
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UnauthorizedError("User not found")
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None:
        raise UnauthorizedError("Missing bearer token")
    return _user_from_credentials(credentials, db)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """The caller if a valid token was sent, otherwise None.

    An invalid or expired token counts as anonymous, so a stale session still
    gets the free preview and is sent to login for everything else.
    """
    if credentials is None:
        return None
    try:
        return _user_from_credentials(credentials, db)
    except UnauthorizedError:
        return None


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    # The role comes from the users row loaded above, not from the token claims.
    if not current_user.is_admin:
        raise ForbiddenError(f"User {current_user.id} is not an admin")
    return current_user
