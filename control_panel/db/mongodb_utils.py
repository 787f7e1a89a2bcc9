# control_panel/db/mongodb_utils.py
import logging
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from control_panel.core.config import (
    MONGO_DATABASE_URL,
    MONGO_DATABASE_NAME,
    USERS_COLLECTION,
    PROFILES_COLLECTION,
    MODERATORS_COLLECTION,
    PENDING_COLLECTION,
    PUBLISHED_COLLECTION,
)
from control_panel.db.store import MongoRecordStore

logger = logging.getLogger(__name__)

class DataBase:
    client: AsyncIOMotorClient = None

db = DataBase()

def get_database() -> AsyncIOMotorDatabase:
    return db.client[MONGO_DATABASE_NAME]

async def get_store() -> MongoRecordStore:
    return MongoRecordStore(get_database())

async def connect_to_mongo():
    logger.info("Connecting to MongoDB...")
    db.client = AsyncIOMotorClient(MONGO_DATABASE_URL)
    await ensure_indexes(get_database())
    logger.info("Successfully connected to MongoDB!")

async def ensure_indexes(database: AsyncIOMotorDatabase):
    """Unique ids are what turns a lost allocation race into a rejected insert."""
    for collection in (PENDING_COLLECTION, PUBLISHED_COLLECTION, PROFILES_COLLECTION):
        await database[collection].create_index("id", unique=True)
    await database[MODERATORS_COLLECTION].create_index("artist_name", unique=True)
    await database[USERS_COLLECTION].create_index("email", unique=True)
    await database[PENDING_COLLECTION].create_index("created_at")
    await database[PUBLISHED_COLLECTION].create_index("created_at")

async def close_mongo_connection():
    logger.info("Closing MongoDB connection...")
    db.client.close()
    logger.info("MongoDB connection closed.")
