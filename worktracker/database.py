"""MongoDB database connection using Motor (async driver)."""
import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from worktracker.config import settings

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"
PROFILES_COLLECTION = "profiles"
PROJECTS_COLLECTION = "projects"
TIME_ENTRIES_COLLECTION = "time_entries"


class Database:
    """MongoDB database connection manager."""

    client: AsyncIOMotorClient | None = None
    db: AsyncIOMotorDatabase | None = None

    async def connect(self) -> None:
        """Connect to MongoDB and make sure the entry indexes exist."""
        self.client = AsyncIOMotorClient(settings.mongodb_url)
        self.db = self.client[settings.mongodb_db_name]
        await self.db[TIME_ENTRIES_COLLECTION].create_index([("user_id", 1), ("start_time", -1)])
        await self.db[PROJECTS_COLLECTION].create_index([("user_id", 1), ("slug", 1)], unique=True)
        await self.db[PROFILES_COLLECTION].create_index("user_id", unique=True)
        logger.info("Connected to MongoDB: %s", settings.mongodb_db_name)

    async def disconnect(self) -> None:
        """Disconnect from MongoDB."""
        if self.client is not None:
            self.client.close()
            self.client = None
            self.db = None
            logger.info("Disconnected from MongoDB")

    def get_collection(self, name: str):
        """Get a MongoDB collection."""
        if self.db is None:
            raise RuntimeError("Database not connected")
        return self.db[name]


# Global database instance
database = Database()


async def get_database() -> AsyncIOMotorDatabase:
    """Dependency to get database instance."""
    if database.db is None:
        raise RuntimeError("Database not connected")
    return database.db
