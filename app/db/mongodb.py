"""
MongoDB connection lifecycle

The client is created once in the application lifespan and only read afterwards.
"""

from datetime import timezone
from typing import Optional

from bson.codec_options import CodecOptions
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from app.core.config import Config, config
from app.core.errors import ErrorResponse
from app.core.logger import logger


class Database:
    """Database connection manager"""

    client: Optional[AsyncIOMotorClient] = None
    database: Optional[AsyncIOMotorDatabase] = None
    collection_name: str = "products"


# BSON dates carry millisecond precision and are read back as aware UTC datetimes
CODEC_OPTIONS = CodecOptions(tz_aware=True, tzinfo=timezone.utc)

db = Database()


async def connect_to_mongo(settings: Config = config):
    """Create database connection and verify it with a ping"""
    logger.info("Connecting to MongoDB...")

    try:
        db.client = AsyncIOMotorClient(
            settings.mongodb_url,
            tz_aware=CODEC_OPTIONS.tz_aware,
            tzinfo=CODEC_OPTIONS.tzinfo,
        )
        db.database = db.client[settings.mongodb_database]
        db.collection_name = settings.mongodb_collection

        await db.client.admin.command("ping")

        logger.info(
            f"Successfully connected to MongoDB database '{settings.mongodb_database}'",
            metadata={
                "event": "mongodb_connected",
                "database": settings.mongodb_database,
                "host": settings.mongodb_host,
                "port": settings.mongodb_port,
            },
        )
    except PyMongoError as e:
        logger.error(
            f"Could not connect to MongoDB: {e}",
            metadata={"event": "mongodb_connection_error", "error": str(e)},
        )
        raise ErrorResponse(f"Could not connect to MongoDB: {e}", status_code=503)


async def close_mongo_connection():
    """Close database connection"""
    logger.info("Closing connection to MongoDB...")
    if db.client is not None:
        db.client.close()
        db.client = None
        db.database = None


async def ping() -> bool:
    """True when the server answers a ping"""
    if db.client is None:
        return False
    try:
        await db.client.admin.command("ping")
        return True
    except PyMongoError as e:
        logger.warning(f"MongoDB ping failed: {e}", metadata={"event": "mongodb_ping_failed"})
        return False


async def get_database() -> AsyncIOMotorDatabase:
    """Get database instance, connecting lazily outside the lifespan"""
    if db.database is None:
        await connect_to_mongo()
    return db.database


async def get_product_collection() -> AsyncIOMotorCollection:
    """Get products collection"""
    database = await get_database()
    return database[db.collection_name]
