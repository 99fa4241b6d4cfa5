# backend/correspondence/crud/users.py
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from correspondence.core.security import hash_password
from correspondence.models.user import ROLE_STAFF, User


def get_by_email(db: Session, email: str) -> User | None:
    stmt = select(User).where(User.email == email)
    return db.execute(stmt).scalar_one_or_none()


def create_user(db: Session, name: str, email: str, password: str, role: str = ROLE_STAFF) -> User:
    u = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=role,
    )

    db.add(u)
    db.commit()
    db.refresh(u)
    return u
