from __future__ import annotations

from pydantic import BaseModel, Field, EmailStr, field_validator, ConfigDict

from correspondence.security.sanitizer import InputSanitizer


class RegisterIn(BaseModel):
    """Self-registration; accounts created this way are always staff."""
    model_config = ConfigDict(extra='forbid')

    name: str = Field(min_length=1, max_length=128)
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = InputSanitizer.sanitize_line(v, max_length=128)
        if not v:
            raise ValueError('Name cannot be empty')
        return v


class LoginIn(BaseModel):
    model_config = ConfigDict(extra='forbid')

    email: EmailStr
    password: str = Field(min_length=1, max_length=128)

    @field_validator('password')
    @classmethod
    def validate_password_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Password cannot be empty')
        return v


class TokenOut(BaseModel):
    model_config = ConfigDict(extra='forbid')

    access_token: str
    token_type: str = "bearer"


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str
