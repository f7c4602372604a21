# mealpass/middleware/db_middleware.py
"""
MealPass API - Database Availability Middleware.

Connects to MongoDB on the first request that needs it when the startup
connection did not succeed, and answers 503 instead of letting a route run
against uninitialised Beanie models.
"""

import asyncio
import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from database import Database
from mealpass.utils.errors import PersistenceError
from settings import settings

logger = logging.getLogger(__name__)

# Served without a database
EXEMPT_PATHS = frozenset({"/", "/health", "/health/detailed", "/docs", "/openapi.json"})

_connect_lock = asyncio.Lock()


async def ensure_database() -> None:
    """
    Open the database connection once, however many requests arrive together.

    Raises:
        Exception: Whatever ``Database.connect_db`` raised.
    """
    if Database._initialized:
        return
    async with _connect_lock:
        if Database._initialized:
            return
        logger.info("Database not initialised, connecting on demand")
        await Database.connect_db(
            database_url=settings.DATABASE_URL,
            database_name=settings.DATABASE_NAME
        )


class LazyDatabaseMiddleware(BaseHTTPMiddleware):
    """Guarantees a live Beanie setup for every non-exempt request."""

    async def dispatch(self, request: Request, call_next):
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        try:
            await ensure_database()
        except Exception as e:
            logger.error(f"Database unavailable for {request.method} {request.url.path}: {e}")
            error = PersistenceError("Database unavailable", detail="Please retry shortly")
            return JSONResponse(status_code=error.status_code, content=error.to_dict())

        return await call_next(request)
