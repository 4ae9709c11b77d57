"""Drop all tracker data for a specific user."""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from motor.motor_asyncio import AsyncIOMotorClient

from worktracker.config import settings
from worktracker.database import PROFILES_COLLECTION, PROJECTS_COLLECTION, TIME_ENTRIES_COLLECTION


async def drop_user_data(user_id: str):
    """Delete every entry, project and profile document owned by a user."""
    client = AsyncIOMotorClient(settings.mongodb_url)
    db = client[settings.mongodb_db_name]

    for collection_name in (TIME_ENTRIES_COLLECTION, PROJECTS_COLLECTION, PROFILES_COLLECTION):
        result = await db[collection_name].delete_many({"user_id": user_id})
        print(f"Deleted {result.deleted_count} documents from {collection_name}")

    client.close()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python drop_user_data.py <user_id>")
        sys.exit(1)

    asyncio.run(drop_user_data(sys.argv[1]))
