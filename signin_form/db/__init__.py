"""Database helpers (connection lifecycle and document model)."""

from .connection import (
    ConnectionFailedError,
    ConnectionManager,
    ConnectionState,
    ConnectionTimeoutError,
    DatabaseConnectionError,
    MissingConfigurationError,
)
from .models import CredentialRecord

__all__ = [
    "ConnectionFailedError",
    "ConnectionManager",
    "ConnectionState",
    "ConnectionTimeoutError",
    "CredentialRecord",
    "DatabaseConnectionError",
    "MissingConfigurationError",
]
