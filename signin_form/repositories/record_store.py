"""Append-only store of submitted email/password pairs."""
from __future__ import annotations

import logging

from pymongo.errors import PyMongoError

from signin_form.db.connection import ConnectionManager
from signin_form.db.models import COLLECTION_NAME, CredentialRecord
from signin_form.domain.credentials import CredentialValidationError, clean, normalize_email

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Base class for record store failures."""


class WriteFailedError(StoreError):
    def __init__(self, cause: BaseException):
        super().__init__(f"Failed to write credential record: {cause}")
        self.cause = cause


class RecordStore:
    """Writes one document per successful submission. Never connects on its own."""

    def __init__(self, connection: ConnectionManager, collection_name: str = COLLECTION_NAME) -> None:
        self.connection = connection
        self.collection_name = collection_name

    async def append(self, email: str, password: str) -> CredentialRecord:
        """
        Persist a new record and return it with its document id.

        Raises:
            CredentialValidationError: email or password empty after trimming.
            ConnectionFailedError: the connection manager is not connected.
            WriteFailedError: the insert was rejected by the server.
        """
        email_value = normalize_email(email)
        if not email_value:
            raise CredentialValidationError("Email is required.")
        if not clean(password):
            raise CredentialValidationError("Password is required.")

        collection = self.connection.database[self.collection_name]
        record = CredentialRecord.new(email_value, password)
        try:
            result = await collection.insert_one(record.to_document())
        except PyMongoError as exc:
            raise WriteFailedError(exc) from exc
        logger.debug("Stored credential record %s in %s", result.inserted_id, self.collection_name)
        return record.with_id(result.inserted_id)
