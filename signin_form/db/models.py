"""Document model for submitted email/password pairs."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId

COLLECTION_NAME = "loginrecords"


@dataclass(frozen=True)
class CredentialRecord:
    email: str
    password: str
    created_at: datetime
    updated_at: datetime
    id: Optional[ObjectId] = field(default=None, compare=False)

    @classmethod
    def new(cls, email: str, password: str) -> "CredentialRecord":
        now = datetime.now(timezone.utc)
        return cls(email=email, password=password, created_at=now, updated_at=now)

    def with_id(self, document_id: ObjectId) -> "CredentialRecord":
        return CredentialRecord(
            email=self.email,
            password=self.password,
            created_at=self.created_at,
            updated_at=self.updated_at,
            id=document_id,
        )

    def to_document(self) -> dict[str, Any]:
        """Field names follow the timestamps convention of the existing collection."""
        return {
            "email": self.email,
            "password": self.password,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
