"""Domain helpers for email/password input validation."""
from __future__ import annotations


class CredentialValidationError(ValueError):
    """Raised when a submitted email or password cannot be stored."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def clean(value: str | None) -> str:
    """Trim surrounding whitespace, treating missing values as empty."""
    return (value or "").strip()


def normalize_email(value: str | None) -> str:
    """Trimmed and lowercased form used for persisted records."""
    return clean(value).lower()


def is_valid_email(value: str | None) -> bool:
    """Return True when the trimmed value is non-empty and contains '@'."""
    candidate = clean(value)
    return bool(candidate) and "@" in candidate
