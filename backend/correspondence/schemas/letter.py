from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict, ValidationInfo, field_validator

from correspondence.security.sanitizer import InputSanitizer


class LetterUpdateIn(BaseModel):
    """
    Editable letter fields, as posted by the letter form.
    Empty optional inputs arrive as "" from HTML forms and are stored as NULL.
    """
    model_config = ConfigDict(extra='ignore')

    reference_number: str = Field(min_length=1, max_length=128)
    agenda_number: str = Field(min_length=1, max_length=64)
    sender: str = Field(min_length=1, max_length=255)
    recipient: Optional[str] = Field(default=None, max_length=255)
    letter_date: date
    received_date: Optional[date] = None
    description: str = Field(min_length=1, max_length=10000)
    note: Optional[str] = Field(default=None, max_length=10000)
    classification_code: str = Field(min_length=1, max_length=32)

    @field_validator('recipient', 'received_date', 'note', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('reference_number', 'agenda_number', 'sender', 'recipient', 'classification_code')
    @classmethod
    def validate_line(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = InputSanitizer.sanitize_line(v)
        if not v:
            raise ValueError('Field cannot be blank')
        return v

    @field_validator('description', 'note')
    @classmethod
    def validate_text(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        if v is None:
            return v
        v = InputSanitizer.sanitize_text(v)
        if info.field_name == 'description' and not v:
            raise ValueError('Description cannot be blank')
        return v

    def letter_fields(self) -> dict:
        return self.model_dump()


class LetterStoreIn(LetterUpdateIn):
    """Create form; carries the letter type marker the caller intends to register."""

    type: str = Field(min_length=1, max_length=16)

    def letter_fields(self) -> dict:
        return self.model_dump(exclude={'type'})
