# backend/correspondence/models/__init__.py
from .user import User
from .classification import Classification
from .letter import Letter, LetterType
from .attachment import Attachment
from .config import Config

__all__ = ["User", "Classification", "Letter", "LetterType", "Attachment", "Config"]
