"""
Connection management for MDB_DOCS.

The process-wide ``AsyncIOMotorClient`` and its bounded connection pool
live here. Repositories borrow connections per operation through the
client; nothing else holds one.
"""

import logging
import time

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from ..config import Settings
from ..constants import (
    APP_NAME,
    DEFAULT_MAX_IDLE_TIME_MS,
    DEFAULT_MAX_POOL_SIZE,
    DEFAULT_MIN_POOL_SIZE,
    DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
)
from ..database.indexes import ensure_indexes
from ..exceptions import InitializationError, PersistenceError
from ..observability import get_logger as get_contextual_logger
from ..observability import record_operation
from ..repositories.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)


class ConnectionManager:
    """
    Owns the MongoDB client: connect, verify, bootstrap indexes, close.
    """

    def __init__(
        self,
        mongo_uri: str,
        db_name: str,
        max_pool_size: int = DEFAULT_MAX_POOL_SIZE,
        min_pool_size: int = DEFAULT_MIN_POOL_SIZE,
        server_selection_timeout_ms: int = DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
        create_indexes: bool = True,
    ) -> None:
        """
        Args:
            mongo_uri: MongoDB connection URI
            db_name: Database name
            max_pool_size: Maximum MongoDB connection pool size
            min_pool_size: Minimum MongoDB connection pool size
            server_selection_timeout_ms: How long the driver looks for a server
            create_indexes: Ensure repository indexes during ``initialize``
        """
        self.mongo_uri = mongo_uri
        self.db_name = db_name
        self.max_pool_size = max_pool_size
        self.min_pool_size = min_pool_size
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self.create_indexes = create_indexes

        self._mongo_client: AsyncIOMotorClient | None = None
        self._mongo_db: AsyncIOMotorDatabase | None = None
        self._initialized: bool = False

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "ConnectionManager":
        """
        Build a manager from ``Settings``.

        Raises:
            ConfigurationError: If the URI or database name is missing
        """
        settings.require_connection()
        return cls(
            mongo_uri=settings.mongo_uri,
            db_name=settings.db_name,
            max_pool_size=settings.max_pool_size,
            min_pool_size=settings.min_pool_size,
            server_selection_timeout_ms=settings.server_selection_timeout_ms,
            **kwargs,
        )

    def _fail(self, message: str, error: Exception, start_time: float) -> InitializationError:
        duration_ms = (time.time() - start_time) * 1000
        record_operation("connection.initialize", duration_ms, success=False)
        contextual_logger.critical(
            message,
            extra={
                "error_type": type(error).__name__,
                "error": str(error),
                "duration_ms": round(duration_ms, 2),
            },
            exc_info=True,
        )
        if self._mongo_client is not None:
            self._mongo_client.close()
            self._mongo_client = None
        return InitializationError(
            f"{message}: {error}",
            mongo_uri=self.mongo_uri,
            db_name=self.db_name,
            context={
                "error_type": type(error).__name__,
                "max_pool_size": self.max_pool_size,
                "min_pool_size": self.min_pool_size,
            },
        )

    async def initialize(self) -> None:
        """
        Connect, ping and (optionally) ensure indexes.

        Raises:
            InitializationError: If the server cannot be reached or the
                index bootstrap fails
        """
        start_time = time.time()

        if self._initialized:
            logger.warning("ConnectionManager already initialized. Skipping re-initialization.")
            return

        contextual_logger.info(
            "Initializing MongoDB connection",
            extra={
                "db_name": self.db_name,
                "max_pool_size": self.max_pool_size,
                "min_pool_size": self.min_pool_size,
            },
        )

        try:
            self._mongo_client = AsyncIOMotorClient(
                self.mongo_uri,
                serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                appname=APP_NAME,
                maxPoolSize=self.max_pool_size,
                minPoolSize=self.min_pool_size,
                maxIdleTimeMS=DEFAULT_MAX_IDLE_TIME_MS,
                retryWrites=True,
                retryReads=True,
                tz_aware=False,
            )
            await self._mongo_client.admin.command("ping")
            db = self._mongo_client[self.db_name]
            if self.create_indexes:
                await ensure_indexes(db)
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            raise self._fail("Failed to connect to MongoDB", e, start_time) from e
        except PersistenceError as e:
            raise self._fail("Failed to prepare indexes", e, start_time) from e
        except (TypeError, ValueError) as e:
            raise self._fail("ConnectionManager initialization failed", e, start_time) from e

        self._mongo_db = db
        self._initialized = True
        duration_ms = (time.time() - start_time) * 1000
        record_operation("connection.initialize", duration_ms, success=True)
        contextual_logger.info(
            "MongoDB connection initialized successfully",
            extra={
                "db_name": self.db_name,
                "pool_size": f"{self.min_pool_size}-{self.max_pool_size}",
                "duration_ms": round(duration_ms, 2),
            },
        )

    async def shutdown(self) -> None:
        """Close the client. Safe to call more than once."""
        if not self._initialized:
            return

        if self._mongo_client:
            self._mongo_client.close()
            contextual_logger.info("MongoDB connection closed.")

        self._initialized = False
        self._mongo_client = None
        self._mongo_db = None

    @property
    def mongo_client(self) -> AsyncIOMotorClient:
        """
        Raises:
            RuntimeError: If connection is not initialized
        """
        if not self._initialized:
            raise RuntimeError("ConnectionManager not initialized. Call initialize() first.")
        return self._mongo_client

    @property
    def mongo_db(self) -> AsyncIOMotorDatabase:
        """
        Raises:
            RuntimeError: If connection is not initialized
        """
        if not self._initialized:
            raise RuntimeError("ConnectionManager not initialized. Call initialize() first.")
        return self._mongo_db

    @property
    def initialized(self) -> bool:
        return self._initialized

    def unit_of_work(self) -> UnitOfWork:
        """A fresh ``UnitOfWork`` over the managed client."""
        return UnitOfWork(self.mongo_client, self.mongo_db)
