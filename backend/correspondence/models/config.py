# backend/correspondence/models/config.py
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from correspondence.db.base import Base


class Config(Base):
    """Flat code -> value settings editable at runtime (letterhead, page size)."""
    __tablename__ = "configs"

    code: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, default="", nullable=False)
