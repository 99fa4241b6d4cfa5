# backend/correspondence/models/letter.py
import enum
from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from correspondence.db.base import Base


class LetterType(str, enum.Enum):
    INCOMING = "incoming"
    OUTGOING = "outgoing"


class Letter(Base):
    __tablename__ = "letters"

    id: Mapped[int] = mapped_column(primary_key=True)

    reference_number: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)
    agenda_number: Mapped[str] = mapped_column(String(64), nullable=False)

    sender: Mapped[str | None] = mapped_column(String(255), nullable=True)
    recipient: Mapped[str | None] = mapped_column(String(255), nullable=True)

    letter_date: Mapped[date] = mapped_column(Date, nullable=False)
    received_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    description: Mapped[str] = mapped_column(Text, nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    type: Mapped[str] = mapped_column(String(16), index=True, nullable=False, default=LetterType.INCOMING.value)

    classification_code: Mapped[str] = mapped_column(
        ForeignKey("classifications.code"), index=True, nullable=False
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    classification = relationship("Classification", back_populates="letters")
    user = relationship("User", back_populates="letters")
    attachments = relationship(
        "Attachment",
        back_populates="letter",
        cascade="all,delete-orphan",
        order_by="Attachment.id",
    )
