import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from billsplit.core.config import settings

logger = logging.getLogger(__name__)

class MongoDatabase:
    """MongoDB connection manager."""

    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

mongodb = MongoDatabase()

async def connect_to_mongo():
    """Connect to MongoDB."""
    mongodb.client = AsyncIOMotorClient(settings.MONGODB_URI)
    mongodb.db = mongodb.client[settings.MONGODB_DB]

    # Create indexes
    await create_indexes()
    logger.info("Connected to MongoDB: %s", settings.MONGODB_DB)

async def close_mongo_connection():
    """Disconnect from MongoDB."""
    if mongodb.client is not None:
        mongodb.client.close()
    logger.info("Disconnected from MongoDB")

async def create_indexes():
    """Create database indexes."""
    # Phone is unique among live users only, so a soft-deleted user's number can be reused
    await mongodb.db["users"].create_index(
        "phone",
        unique=True,
        partialFilterExpression={"is_deleted": False}
    )
    await mongodb.db["users"].create_index([("created_at", -1)])

    # Bill indexes
    await mongodb.db["bills"].create_index([("date", -1)])
    await mongodb.db["bill_items"].create_index("bill_id")

    # Settlement indexes
    await mongodb.db["settlements"].create_index("bill_id")
    await mongodb.db["settlements"].create_index([("from_user_id", 1), ("status", 1)])
    await mongodb.db["settlements"].create_index([("to_user_id", 1), ("status", 1)])

def get_db() -> AsyncIOMotorDatabase:
    """Get database instance."""
    return mongodb.db
