"""
Input sanitization for letter form fields and uploaded file names.

Rejects:
- Null bytes and control characters (newlines allowed in free-text fields)
- Script/XSS payloads (templates autoescape, this keeps them out of the DB too)
"""
import re
from typing import Optional


class InputSanitizer:
    """Validates and sanitizes user input."""

    NULL_BYTE_PATTERN = re.compile(r'\x00')
    CONTROL_CHAR_PATTERN = re.compile(r'[\x00-\x08\x0b-\x0c\x0e-\x1f\x7f]')  # Except \t, \n, \r
    LINE_BREAK_PATTERN = re.compile(r'[\r\n]')
    SCRIPT_PATTERN = re.compile(r'<script|javascript:|onerror|onclick|<iframe|<embed', re.IGNORECASE)

    @staticmethod
    def sanitize_string(value: str, max_length: Optional[int] = None, allow_newlines: bool = False) -> str:
        """
        Sanitize string input.

        Args:
            value: Input string
            max_length: Optional max length
            allow_newlines: Allow \n and \r characters (description, note)

        Returns:
            The value, stripped of surrounding whitespace

        Raises:
            ValueError: If input contains dangerous patterns
        """
        if not isinstance(value, str):
            raise ValueError("Input must be string")

        if InputSanitizer.NULL_BYTE_PATTERN.search(value):
            raise ValueError("Null bytes not allowed")

        if InputSanitizer.CONTROL_CHAR_PATTERN.search(value):
            raise ValueError("Control characters not allowed")

        if not allow_newlines and InputSanitizer.LINE_BREAK_PATTERN.search(value):
            raise ValueError("Line breaks not allowed")

        if InputSanitizer.SCRIPT_PATTERN.search(value):
            raise ValueError("Script/XSS patterns not allowed")

        value = value.strip()

        if max_length and len(value) > max_length:
            raise ValueError(f"Input exceeds max length of {max_length}")

        return value

    @staticmethod
    def sanitize_line(value: str, max_length: int = 255) -> str:
        """Single-line field (reference number, sender, ...)."""
        return InputSanitizer.sanitize_string(value, max_length=max_length, allow_newlines=False)

    @staticmethod
    def sanitize_text(value: str, max_length: int = 10000) -> str:
        """Free text; keeps line structure but trims trailing blanks."""
        sanitized = InputSanitizer.sanitize_string(value, max_length=max_length, allow_newlines=True)
        return '\n'.join(line.rstrip() for line in sanitized.split('\n'))

    @staticmethod
    def client_basename(filename: str) -> str:
        """
        Name of an uploaded file as the client had it, without any directory part.
        Browsers on Windows may send a full path.
        """
        if not filename:
            return ''
        return filename.replace('\\', '/').split('/')[-1]
