from __future__ import annotations

from datetime import datetime, timedelta

from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError
from jose import jwt, JWTError

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from correspondence.core.config import settings
from correspondence.db.session import get_db


_ph = PasswordHasher(
    time_cost=2,
    memory_cost=102400,  # ~100 MB
    parallelism=8,
    hash_len=32,
    salt_len=16,
)


def hash_password(password: str) -> str:
    return _ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _ph.verify(password_hash, password)
    except VerifyMismatchError:
        return False


def create_access_token(subject: str, extra: dict | None = None) -> str:
    payload = {
        "sub": subject,
        "exp": datetime.utcnow() + timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
    }
    if extra:
        payload.update(extra)

    token = jwt.encode(
        payload,
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    return token


def decode_access_token(token: str) -> dict | None:
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError:
        return None


_security = HTTPBearer(auto_error=False)

# Session key holding the token issued at login, for browser requests
SESSION_TOKEN_KEY = "access_token"


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid authentication credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_security),
    db: Session = Depends(get_db),
):
    """
    Dependency: Extract JWT token, verify it, and fetch User object from DB.
    Expects: Authorization: Bearer <token>, or the token /auth/login left in the
    signed session cookie (links and form posts from the rendered pages)
    Returns: User object
    Raises: HTTPException 401 if token missing/invalid/expired or user not found/inactive
    """
    from correspondence.models.user import User  # avoid circular imports

    if credentials is not None:
        token = credentials.credentials
    else:
        token = request.session.get(SESSION_TOKEN_KEY)
    if not token:
        raise _unauthorized()

    payload = decode_access_token(token)
    if not payload or not payload.get("sub"):
        raise _unauthorized()

    user = db.get(User, int(payload["sub"]))
    if not user or not user.is_active:
        raise _unauthorized()

    return user
