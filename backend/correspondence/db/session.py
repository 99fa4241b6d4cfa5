# backend/correspondence/db/session.py
from __future__ import annotations

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from correspondence.core.config import settings

IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def build_engine(url: str) -> Engine:
    """
    Engine for ``url``. SQLite connections may be used from FastAPI's worker
    threads; an in-memory database lives on a single shared connection so
    every session sees the same tables.
    """
    kwargs = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in IN_MEMORY_URLS:
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def build_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


engine = build_engine(settings.database_url)

SessionLocal = build_session_factory(engine)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
