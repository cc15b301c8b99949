import uuid
from dataclasses import dataclass

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from zopforms.core.config import settings
from zopforms.core.database import get_db
from zopforms.models.user import User
from zopforms.services.auth import decode_token, get_user_by_id

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """Caller resolved from a session token and their current account row."""

    user_id: uuid.UUID
    email: str

    @classmethod
    def from_user(cls, user: User) -> "Identity":
        return cls(user_id=user.id, email=user.email)


def _token_from_request(
    request: Request, credentials: HTTPAuthorizationCredentials | None
) -> str | None:
    """An explicit ``Authorization: Bearer`` header wins over the session cookie."""
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(settings.AUTH_COOKIE_NAME) or None


def _user_id_from_payload(payload: dict) -> uuid.UUID | None:
    if payload.get("type") != "access":
        return None
    try:
        return uuid.UUID(payload.get("sub") or "")
    except ValueError:
        return None


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Load the account behind the session token or fail with 401/403."""
    token = _token_from_request(request, credentials)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    try:
        payload = decode_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
        )
    except jwt.PyJWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )

    user_id = _user_id_from_payload(payload)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    user = get_user_by_id(db, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )
    return user


def get_current_identity(current_user: User = Depends(get_current_user)) -> Identity:
    return Identity.from_user(current_user)


def get_optional_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> Identity | None:
    """Resolve the caller for public endpoints.

    Bad or expired tokens, and tokens of deleted or deactivated accounts,
    count as anonymous.
    """
    token = _token_from_request(request, credentials)
    if token is None:
        return None
    try:
        payload = decode_token(token)
    except jwt.PyJWTError:
        return None

    user_id = _user_id_from_payload(payload)
    if user_id is None:
        return None
    user = get_user_by_id(db, user_id)
    if user is None or not user.is_active:
        return None
    return Identity.from_user(user)
