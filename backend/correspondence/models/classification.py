# backend/correspondence/models/classification.py
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from correspondence.db.base import Base


class Classification(Base):
    __tablename__ = "classifications"

    code: Mapped[str] = mapped_column(String(32), primary_key=True)
    type: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    letters = relationship("Letter", back_populates="classification")
