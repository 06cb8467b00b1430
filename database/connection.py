"""Lazy, single-flight MongoDB connection provider"""
import asyncio
import logging
from typing import Any, Callable, Optional

from motor.motor_asyncio import AsyncIOMotorClient

from services.exceptions import DatabaseConnectionError

logger = logging.getLogger(__name__)


class ConnectionProvider:
    """
    Owns the shared AsyncIOMotorClient for the application.

    The client is created on the first call to acquire(). Concurrent first
    callers wait on a lock so that exactly one connect + ping sequence runs and
    all of them observe its outcome.

    By default the outcome of that attempt is permanent: a failed startup is
    re-raised on every later call until close() resets the provider. With
    retry_on_failure=True a failed attempt is not latched and the next call
    runs a fresh attempt; a success is always latched.

    A round whose caller is cancelled mid-connect records no outcome: its
    client is closed and the next caller starts a new round.
    """

    def __init__(
        self,
        uri: str,
        *,
        server_selection_timeout_ms: int = 5000,
        retry_on_failure: bool = False,
        client_factory: Callable[..., Any] = AsyncIOMotorClient,
    ):
        self._uri = uri
        self._server_selection_timeout_ms = server_selection_timeout_ms
        self._retry_on_failure = retry_on_failure
        self._client_factory = client_factory
        self._lock = asyncio.Lock()
        self._initialized = False
        self._client: Optional[AsyncIOMotorClient] = None
        self._error: Optional[Exception] = None
        self._completed_rounds = 0
        self.attempts = 0

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def acquire(self) -> AsyncIOMotorClient:
        """Returns the shared client, connecting on first use."""
        if not self._initialized:
            # Rounds are only counted once they finish, so a caller that waited
            # on the lock while a round ran shares that round's outcome
            observed_rounds = self._completed_rounds
            async with self._lock:
                if not self._initialized and self._completed_rounds == observed_rounds:
                    await self._initialize()
        if self._error is not None:
            raise DatabaseConnectionError(f"MongoDB connection unavailable: {self._error}") from self._error
        return self._client

    async def _initialize(self) -> None:
        self.attempts += 1
        logger.info(f"Connecting to MongoDB (attempt {self.attempts})...")
        client = None
        connected = False
        try:
            client = self._client_factory(
                self._uri,
                serverSelectionTimeoutMS=self._server_selection_timeout_ms,
                tz_aware=True,
            )
            await client.admin.command("ping")
            connected = True
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            self._finish_round(None, e)
        else:
            logger.info("MongoDB ping successful.")
            self._finish_round(client, None)
        finally:
            # Also covers a cancelled round, which records no outcome
            if not connected and client is not None:
                client.close()

    def _finish_round(self, client: Optional[AsyncIOMotorClient], error: Optional[Exception]) -> None:
        self._client = client
        self._error = error
        self._initialized = error is None or not self._retry_on_failure
        self._completed_rounds += 1

    def close(self) -> None:
        """Closes the client, if any, and resets the provider."""
        if self._client is not None:
            logger.info("Closing MongoDB connection...")
            self._client.close()
            logger.info("MongoDB connection closed.")
        self._client = None
        self._error = None
        self._initialized = False
