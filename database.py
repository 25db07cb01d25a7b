# database.py
"""
Taste Palette MongoDB connection.

One Motor client per process; Beanie is initialized on top of it.
"""

from contextlib import asynccontextmanager
from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie
from pymongo.errors import PyMongoError
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class Database:
    """Process-wide MongoDB client and Beanie registration."""

    client: Optional[AsyncIOMotorClient] = None
    _initialized: bool = False

    @classmethod
    async def connect_db(cls, database_url: str, database_name: str):
        """
        Open the client, check the server answers, then register models.

        Calling it again after a successful connect does nothing.

        Raises:
            PyMongoError: Server unreachable or rejected the ping.
        """
        if cls._initialized:
            return

        cls.client = AsyncIOMotorClient(
            database_url,
            serverSelectionTimeoutMS=5000,
            maxPoolSize=50,
            minPoolSize=10
        )
        try:
            await cls.client.admin.command("ping")
        except PyMongoError as e:
            logger.error(f"MongoDB unreachable: {e}")
            cls.client.close()
            cls.client = None
            raise

        logger.info(f"Connected to MongoDB database {database_name}")
        await cls.init_models(cls.client[database_name])
        cls._initialized = True

    @classmethod
    async def init_models(cls, db):
        """Register every document model with Beanie on the given database."""
        from app.models.mongodb import DOCUMENT_MODELS

        await init_beanie(database=db, document_models=DOCUMENT_MODELS)
        logger.info(f"Beanie initialized with {len(DOCUMENT_MODELS)} document models")

    @classmethod
    async def close_db(cls):
        if cls.client:
            cls.client.close()
            cls.client = None
            cls._initialized = False
            logger.info("MongoDB client closed")

    @classmethod
    async def ping(cls) -> bool:
        """True when the server answers a ping."""
        if not cls.client:
            return False
        try:
            await cls.client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False

    @classmethod
    @asynccontextmanager
    async def transaction(cls):
        """
        Run a block inside a MongoDB multi-document transaction.

        Yields the session to pass into Beanie calls (``session=...``).
        The transaction commits when the block exits and aborts on error.
        Requires a replica set deployment.
        """
        async with await cls.client.start_session() as session:
            async with session.start_transaction():
                yield session
