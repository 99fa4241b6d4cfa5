# backend/correspondence/db/init_db.py
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from correspondence.core.config import settings
from correspondence.core.logger import logger
from correspondence.db.base import Base
from correspondence.db.session import SessionLocal, engine

# models must be imported so the tables are registered on Base.metadata
from correspondence import models  # noqa: F401
from correspondence.models import Classification, Config, User
from correspondence.models.user import ROLE_ADMIN

DEFAULT_CLASSIFICATIONS = [
    {"code": "STAFF", "type": "Staff", "description": "Letters concerning staff matters"},
]

DEFAULT_CONFIGS = {
    "page_size": "10",
    "app_name": "Correspondence",
    "institution_name": "",
    "institution_address": "",
    "institution_phone": "",
    "institution_email": "",
    "language": "en",
    "pic": "",
}


def seed_defaults(db: Session) -> None:
    """Insert the reference rows the views rely on, leaving existing ones alone."""
    for row in DEFAULT_CLASSIFICATIONS:
        if db.get(Classification, row["code"]) is None:
            db.add(Classification(**row))

    for code, value in DEFAULT_CONFIGS.items():
        if db.get(Config, code) is None:
            db.add(Config(code=code, value=value))

    if settings.admin_email and settings.admin_password:
        from correspondence.crud.users import create_user

        stmt = select(User).where(User.email == settings.admin_email)
        if db.execute(stmt).scalar_one_or_none() is None:
            create_user(
                db,
                name=settings.admin_name,
                email=settings.admin_email,
                password=settings.admin_password,
                role=ROLE_ADMIN,
            )
            logger.info(f"Created bootstrap admin {settings.admin_email}")

    db.commit()


def init_db(bind: Engine = engine) -> None:
    Base.metadata.create_all(bind=bind)

    db = SessionLocal(bind=bind)
    try:
        seed_defaults(db)
    finally:
        db.close()
