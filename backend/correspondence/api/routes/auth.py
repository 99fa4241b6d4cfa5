# backend/correspondence/api/routes/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from correspondence.db.session import get_db
from correspondence.schemas.auth import RegisterIn, LoginIn, TokenOut, UserOut
from correspondence.crud.users import get_by_email, create_user
from correspondence.core.logger import logger
from correspondence.core.security import (
    verify_password,
    create_access_token,
    get_current_user,
    SESSION_TOKEN_KEY,
)
from correspondence.models.user import User
from correspondence.security.rate_limit import is_rate_limited, record_auth_attempt, get_rate_limit_delay
from correspondence.security.password_strength import validate_password_strength

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=UserOut)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    is_valid, error_msg = validate_password_strength(payload.password)
    if not is_valid:
        raise HTTPException(status_code=400, detail=error_msg)

    if get_by_email(db, payload.email):
        raise HTTPException(status_code=400, detail="Invalid credentials")

    u = create_user(db, payload.name, payload.email, payload.password)
    logger.info(f"Registered staff user {u.id}")
    return u


@router.post("/login", response_model=TokenOut)
def login(payload: LoginIn, request: Request, db: Session = Depends(get_db)):
    if is_rate_limited(payload.email):
        delay = get_rate_limit_delay(payload.email)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Too many login attempts. Try again in {int(delay) + 1} seconds."
        )

    u = get_by_email(db, payload.email)
    if not u or not u.is_active or not verify_password(payload.password, u.password_hash):
        record_auth_attempt(payload.email, success=False)
        logger.warning(f"Failed login for {payload.email}")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    record_auth_attempt(payload.email, success=True)

    access_token = create_access_token(subject=str(u.id), extra={"role": u.role})
    # browsers carry the session cookie on links and form posts, never a bearer header
    request.session[SESSION_TOKEN_KEY] = access_token
    logger.info(f"User {u.id} logged in")
    return TokenOut(access_token=access_token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(request: Request):
    request.session.pop(SESSION_TOKEN_KEY, None)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user
