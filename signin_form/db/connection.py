"""
Lazy, memoized MongoDB connection.

A single ``ConnectionManager`` is built per application and shared by every
request. The first caller of ``ensure_connected`` starts the connect attempt;
callers arriving while it is in flight await the same attempt. A failed
attempt leaves the manager unconnected so the next request can try again.
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ServerSelectionTimeoutError

from signin_form.core.config import MONGO_URI_VARS, Settings

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    UNCONNECTED = "unconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class DatabaseConnectionError(Exception):
    """Base class for failures to reach the database."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class MissingConfigurationError(DatabaseConnectionError):
    """No connection target is configured for this deployment."""


class ConnectionTimeoutError(DatabaseConnectionError):
    """No server answered within the server selection timeout."""


class ConnectionFailedError(DatabaseConnectionError):
    """Any other failure to establish or use the connection."""


def _consume_outcome(task: "asyncio.Task[None]") -> None:
    # every waiter may have been cancelled; keep asyncio from warning about the error
    if not task.cancelled():
        task.exception()


class ConnectionManager:
    """Owns the single shared Mongo client and its connection state."""

    def __init__(
        self,
        uri: str | None,
        database_name: str,
        *,
        server_selection_timeout_ms: int = 7000,
        client_factory: Callable[..., Any] = AsyncIOMotorClient,
    ) -> None:
        self._uri = (uri or "").strip()
        self._database_name = database_name
        self._timeout_ms = server_selection_timeout_ms
        self._client_factory = client_factory
        self._state = ConnectionState.UNCONNECTED
        self._attempt: Optional[asyncio.Task[None]] = None
        self._client: Any = None
        self._database: Optional[AsyncIOMotorDatabase] = None

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "ConnectionManager":
        return cls(
            settings.mongo_uri,
            settings.mongo_db_name,
            server_selection_timeout_ms=settings.mongo_server_selection_timeout_ms,
            **kwargs,
        )

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def database(self) -> AsyncIOMotorDatabase:
        if self._state is not ConnectionState.CONNECTED or self._database is None:
            raise ConnectionFailedError("MongoDB is not connected; call ensure_connected() first.")
        return self._database

    async def ensure_connected(self) -> None:
        """
        Connect on first use and reuse the connection afterwards.

        Raises:
            MissingConfigurationError: no Mongo URI configured (state untouched).
            ConnectionTimeoutError: server selection timed out.
            ConnectionFailedError: any other connect failure.
        """
        if not self._uri:
            raise MissingConfigurationError(
                "Mongo URI is missing. Set one of: " + ", ".join(MONGO_URI_VARS) + "."
            )
        if self._state is ConnectionState.CONNECTED:
            return
        if self._attempt is None:
            # no await between the check and the assignment
            self._state = ConnectionState.CONNECTING
            self._attempt = asyncio.ensure_future(self._connect())
            self._attempt.add_done_callback(_consume_outcome)
        # a disconnecting client must not cancel the attempt other requests share
        await asyncio.shield(self._attempt)

    async def _connect(self) -> None:
        client: Any = None
        try:
            client = self._client_factory(self._uri, serverSelectionTimeoutMS=self._timeout_ms)
            database = client[self._database_name]
            await database.command("ping")
        except ServerSelectionTimeoutError as exc:
            self._reset(client)
            raise ConnectionTimeoutError(
                f"No MongoDB server selected within {self._timeout_ms} ms.", cause=exc
            ) from exc
        except asyncio.CancelledError:
            self._reset(client)
            raise
        except Exception as exc:
            self._reset(client)
            raise ConnectionFailedError(f"MongoDB connection failed: {exc}", cause=exc) from exc

        self._client = client
        self._database = database
        self._state = ConnectionState.CONNECTED
        self._attempt = None
        logger.info("MongoDB connected (database=%s)", self._database_name)

    def _reset(self, client: Any) -> None:
        self._state = ConnectionState.UNCONNECTED
        self._attempt = None
        self._client = None
        self._database = None
        if client is not None:
            client.close()

    async def close(self) -> None:
        """
        Close the client, if any, and go back to unconnected.

        An attempt still in flight is cancelled and waited for, so it cannot
        mark the manager connected after shutdown. Its waiters see
        ``asyncio.CancelledError``.
        """
        attempt = self._attempt
        if attempt is not None and not attempt.done():
            attempt.cancel()
            await asyncio.wait([attempt])
        self._reset(self._client)
