"""
MongoDB connection management.
"""
import logging
from contextlib import contextmanager

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import (
    AutoReconnect,
    ConnectionFailure,
    ExecutionTimeout,
    NetworkTimeout,
    ServerSelectionTimeoutError,
    WTimeoutError,
)

from staff_directory.core.config import settings
from staff_directory.core.errors import StorageTimeout, StorageUnavailable

logger = logging.getLogger(__name__)


class MongoDB:
    """
    MongoDB connection manager.
    Provides access to database and collections with connection management.
    """

    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

    @classmethod
    def connect_to_mongodb(cls):
        """
        Connect to MongoDB if not already connected.
        The driver connects lazily, so this never blocks on the network.
        """
        if cls.client is None:
            logger.info(f"Connecting to MongoDB at {settings.MONGODB_URL} (database: {settings.MONGODB_DB})")

            cls.client = AsyncIOMotorClient(
                settings.MONGODB_URL,
                serverSelectionTimeoutMS=settings.MONGODB_TIMEOUT_MS,
                connectTimeoutMS=settings.MONGODB_TIMEOUT_MS,
                socketTimeoutMS=settings.MONGODB_TIMEOUT_MS,
            )
            cls.db = cls.client[settings.MONGODB_DB]

    @classmethod
    async def close_mongodb_connection(cls):
        """
        Close MongoDB connection if open.
        """
        if cls.client is not None:
            cls.client.close()
            cls.client = None
            cls.db = None
            logger.info("Closed MongoDB connection")

    @classmethod
    def get_database(cls) -> AsyncIOMotorDatabase:
        """
        Get database instance.

        Returns:
            AsyncIOMotorDatabase instance
        """
        if cls.db is None:
            cls.connect_to_mongodb()
        return cls.db

    @classmethod
    def get_collection(cls, collection_name: str):
        """
        Get collection by name.

        Args:
            collection_name: Name of collection

        Returns:
            AsyncIOMotorCollection instance
        """
        return cls.get_database()[collection_name]


mongodb = MongoDB()


@contextmanager
def storage_errors():
    """
    Translate driver failures into retryable directory errors.

    Timeouts become StorageTimeout, lost connections StorageUnavailable.
    Everything else (including DuplicateKeyError) propagates unchanged.
    """
    try:
        yield
    except (ServerSelectionTimeoutError, NetworkTimeout, ExecutionTimeout, WTimeoutError) as e:
        logger.error(f"Storage timeout: {str(e)}")
        raise StorageTimeout() from e
    except (AutoReconnect, ConnectionFailure) as e:
        logger.error(f"Storage unavailable: {str(e)}")
        raise StorageUnavailable() from e


# Helper function to get collections
def get_collection(name: str):
    return mongodb.get_collection(name)
