# async mongodb client for the notes api
# uses motor for non-blocking operations

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from innervoice.config import settings

logger = logging.getLogger(__name__)


class Database:
    """async mongodb connection manager"""

    def __init__(self):
        self.client: Optional[AsyncIOMotorClient] = None
        self.db: Optional[AsyncIOMotorDatabase] = None

    async def connect(self):
        """establish connection to mongodb and make sure note indexes exist"""
        if self.client is not None:
            return

        logger.info(f"Connecting to MongoDB database: {settings.MONGODB_DATABASE}")
        self.client = AsyncIOMotorClient(
            settings.MONGODB_URI,
            serverSelectionTimeoutMS=settings.MONGODB_TIMEOUT_MS,
            socketTimeoutMS=settings.MONGODB_TIMEOUT_MS,
        )
        self.db = self.client[settings.MONGODB_DATABASE]

        # verify connection
        await self.client.admin.command("ping")
        await self.ensure_indexes()
        logger.info("MongoDB connection established")

    async def ensure_indexes(self):
        """unique note ids, newest-first listing, tag lookups"""
        await self.notes.create_index([("note_id", ASCENDING)], unique=True)
        await self.notes.create_index([("created_at", DESCENDING)])
        await self.notes.create_index([("tags", ASCENDING)])

    async def close(self):
        """close mongodb connection"""
        if self.client:
            self.client.close()
            self.client = None
            self.db = None
            logger.info("MongoDB connection closed")

    # collection accessors

    @property
    def notes(self):
        return self.db["notes"]


# singleton instance
db = Database()
