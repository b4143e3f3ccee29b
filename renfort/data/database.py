"""
Database connection manager for Renfort.

PyMongo backs the repositories; Motor is used for index creation.
"""

from typing import Optional
from urllib.parse import quote_plus

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from renfort.utils.config import get_settings
from renfort.utils.logger import get_logger

logger = get_logger(__name__)


class DatabaseManager:
    """
    Manages MongoDB database connections.

    Repositories share one lazily created synchronous client. Index
    creation opens its own short-lived Motor client.
    """

    _instance: Optional["DatabaseManager"] = None
    _mongo_client: Optional[MongoClient] = None

    def __new__(cls) -> "DatabaseManager":
        """Ensure singleton instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        """Initialize database manager with settings."""
        if hasattr(self, "_initialized") and self._initialized:
            return

        self._settings = get_settings()
        self._db_name = self._settings.database.name
        self._uri = self._build_uri()
        self._initialized = True

    def _build_uri(self) -> str:
        """
        Build MongoDB connection URI from settings.

        Credentials are URL-encoded so special characters survive.
        """
        db_settings = self._settings.database

        host = db_settings.host.strip()
        if not host or any(c in host for c in [";", "&", "|", "$", "`"]):
            raise ValueError(f"Invalid database host: {host}")

        auth = ""
        if db_settings.username and db_settings.password:
            encoded_user = quote_plus(db_settings.username)
            encoded_pass = quote_plus(db_settings.password)
            auth = f"{encoded_user}:{encoded_pass}@"

        return f"mongodb://{auth}{host}:{db_settings.port}"

    # -------------------------------------------------------------------------
    # Connections
    # -------------------------------------------------------------------------

    def _client(self) -> MongoClient:
        if self._mongo_client is None:
            logger.info(f"Connecting to MongoDB database {self._db_name}")
            self._mongo_client = MongoClient(
                self._uri,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=5000,
                maxPoolSize=50,
                tz_aware=True,
            )
        return self._mongo_client

    def get_collection(self, collection_name: str) -> Collection:
        return self._client()[self._db_name][collection_name]

    def ping(self) -> bool:
        """Whether MongoDB answers. A failed ping drops the cached client."""
        try:
            self._client().admin.command("ping")
            return True
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.error(f"MongoDB ping failed: {e}")
            self._mongo_client = None
            return False

    # -------------------------------------------------------------------------
    # Index Management
    # -------------------------------------------------------------------------

    async def ensure_indexes(self) -> None:
        """
        Create indexes for the missions, users and applications collections.

        Runs on a Motor client that lives only for the duration of the call.
        """
        logger.info("Ensuring database indexes")
        client = AsyncIOMotorClient(
            self._uri,
            serverSelectionTimeoutMS=5000,
            connectTimeoutMS=5000,
            tz_aware=True,
        )
        try:
            await self._create_indexes(client[self._db_name])
        finally:
            client.close()
        logger.info("Database indexes created successfully")

    @staticmethod
    async def _create_indexes(db: AsyncIOMotorDatabase) -> None:
        missions = db["missions"]
        await missions.create_index("client_id")
        await missions.create_index("status")
        await missions.create_index("urgency_level")
        await missions.create_index("start_date")
        await missions.create_index("created_at")

        # Candidate search: role/status equality, then the bounding box range
        users = db["users"]
        await users.create_index("email", unique=True)
        await users.create_index(
            [
                ("role", ASCENDING),
                ("status", ASCENDING),
                ("profile.latitude", ASCENDING),
                ("profile.longitude", ASCENDING),
            ]
        )
        await users.create_index("profile.specialties")

        # One application per (mission, talent)
        applications = db["mission_applications"]
        await applications.create_index(
            [("mission_id", ASCENDING), ("talent_id", ASCENDING)], unique=True
        )
        await applications.create_index([("mission_id", ASCENDING), ("created_at", DESCENDING)])
        await applications.create_index("talent_id")
        await applications.create_index("status")


# Global database manager instance
_db_manager: Optional[DatabaseManager] = None


def get_database_manager() -> DatabaseManager:
    """Get the global database manager instance."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager

