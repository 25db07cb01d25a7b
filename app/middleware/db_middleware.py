# app/middleware/db_middleware.py
"""
Taste Palette API - Lazy Database Middleware.

Retries the MongoDB connection on the first request after a startup
that could not reach the database.
"""

from fastapi import Request
from pymongo.errors import PyMongoError
from starlette.middleware.base import BaseHTTPMiddleware
import logging

from database import Database
from settings import settings

logger = logging.getLogger(__name__)

# Served without touching the database
DATABASE_FREE_PATHS = {"/", "/health", "/health/detailed"}


class LazyDatabaseMiddleware(BaseHTTPMiddleware):
    """Connect to MongoDB before the first request that needs it."""

    async def dispatch(self, request: Request, call_next):
        if request.url.path not in DATABASE_FREE_PATHS and not Database._initialized:
            try:
                logger.info("Connecting to MongoDB on first request")
                await Database.connect_db(settings.DATABASE_URL, settings.DATABASE_NAME)
            except PyMongoError as e:
                # The route's own database call surfaces the failure
                logger.error(f"Lazy MongoDB connection failed: {e}")

        return await call_next(request)
