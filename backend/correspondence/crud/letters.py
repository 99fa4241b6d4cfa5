# backend/correspondence/crud/letters.py
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import Select, func, or_, select
from sqlalchemy.orm import Session, selectinload

from correspondence.core.config import settings
from correspondence.models import Attachment, Classification, Config, Letter, LetterType
from correspondence.models.user import ROLE_STAFF, User

# Columns the agenda date range may be applied to
AGENDA_FILTER_COLUMNS = {
    "letter_date": Letter.letter_date,
    "received_date": Letter.received_date,
    "created_at": Letter.created_at,
}


@dataclass
class Page:
    items: List[Letter]
    page: int
    per_page: int
    total: int

    @property
    def pages(self) -> int:
        return max(1, math.ceil(self.total / self.per_page)) if self.per_page else 1

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.pages


def incoming_query() -> Select:
    return select(Letter).where(Letter.type == LetterType.INCOMING.value)


def visible_to(stmt: Select, user: User) -> Select:
    """Staff only ever see the letters they registered themselves."""
    if user.role == ROLE_STAFF:
        stmt = stmt.where(Letter.user_id == user.id)
    return stmt


def search(stmt: Select, term: Optional[str]) -> Select:
    if not term:
        return stmt
    like = f"%{term}%"
    return stmt.where(
        or_(
            Letter.reference_number.ilike(like),
            Letter.agenda_number.ilike(like),
            Letter.sender.ilike(like),
            Letter.recipient.ilike(like),
            Letter.description.ilike(like),
        )
    )


def agenda(stmt: Select, since: Optional[date], until: Optional[date], column: Optional[str]) -> Select:
    """Restrict to a date range on one of the agenda columns; ignored unless all three are given."""
    if not (since and until and column in AGENDA_FILTER_COLUMNS):
        return stmt
    target = AGENDA_FILTER_COLUMNS[column]
    return stmt.where(func.date(target) >= since.isoformat(), func.date(target) <= until.isoformat())


def _with_relations(stmt: Select) -> Select:
    return stmt.options(
        selectinload(Letter.classification),
        selectinload(Letter.user),
        selectinload(Letter.attachments),
    )


def _ordered(stmt: Select) -> Select:
    return stmt.order_by(Letter.letter_date.desc(), Letter.id.desc())


def paginate(db: Session, stmt: Select, page: int, per_page: int) -> Page:
    page = max(1, page)
    total = db.execute(select(func.count()).select_from(stmt.order_by(None).subquery())).scalar_one()
    rows = db.execute(
        _ordered(_with_relations(stmt)).limit(per_page).offset((page - 1) * per_page)
    ).scalars().all()
    return Page(items=list(rows), page=page, per_page=per_page, total=total)


def all_matching(db: Session, stmt: Select) -> List[Letter]:
    return list(db.execute(_ordered(_with_relations(stmt))).scalars().all())


def get_incoming(db: Session, letter_id: int) -> Letter | None:
    stmt = _with_relations(incoming_query().where(Letter.id == letter_id))
    return db.execute(stmt).scalar_one_or_none()


def reference_taken(db: Session, reference_number: str, exclude_id: int | None = None) -> bool:
    stmt = select(Letter.id).where(Letter.reference_number == reference_number)
    if exclude_id is not None:
        stmt = stmt.where(Letter.id != exclude_id)
    return db.execute(stmt).first() is not None


def list_classifications(db: Session) -> List[Classification]:
    return list(db.execute(select(Classification).order_by(Classification.code)).scalars().all())


def config_map(db: Session) -> Dict[str, str]:
    return {c.code: c.value for c in db.execute(select(Config)).scalars().all()}


def page_size(db: Session) -> int:
    row = db.get(Config, "page_size")
    try:
        size = int(row.value) if row else settings.default_page_size
    except ValueError:
        size = settings.default_page_size
    return size if size > 0 else settings.default_page_size


def add_attachment(db: Session, letter_id: int, user_id: int, filename: str, extension: str) -> Attachment:
    attachment = Attachment(
        filename=filename,
        extension=extension,
        user_id=user_id,
        letter_id=letter_id,
    )
    db.add(attachment)
    return attachment


def referenced_filenames(db: Session, filenames: Iterable[str]) -> Set[str]:
    """Which of ``filenames`` some attachment row still points at."""
    filenames = list(filenames)
    if not filenames:
        return set()
    stmt = select(Attachment.filename).where(Attachment.filename.in_(filenames))
    return set(db.execute(stmt).scalars().all())
