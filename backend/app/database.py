"""
Postboard Backend — Document Store Client
===========================================

What:  MongoDB client lifecycle and the FastAPI dependency for the posts collection.
How:   A single pymongo AsyncMongoClient per process, created lazily and
       closed on shutdown. Requests get the `posts` collection through
       `get_posts_collection`.
Who:   Used by route dependencies (collection) and by main.py (lifecycle).
When:  Client is created on first use; closed in the lifespan shutdown.

The client owns no business logic. It does not create indexes or
collections: MongoDB creates `posts` on the first insert.

Timeouts:
    serverSelectionTimeoutMS: how long to wait for a reachable server
    timeoutMS:                client-side bound on every operation
    Both come from settings.store_timeout_ms.
"""

import logging
from typing import Any, Dict, Optional

from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from app.config import settings

logger = logging.getLogger(__name__)

_client: Optional[AsyncMongoClient] = None


def get_client() -> AsyncMongoClient:
    """
    Return the process-wide client, creating it on first call.

    AsyncMongoClient does not perform I/O at construction; the first
    operation (or ping) opens the connection pool.
    """
    global _client
    if _client is None:
        _client = AsyncMongoClient(
            settings.mongo_url,
            serverSelectionTimeoutMS=settings.store_timeout_ms,
            timeoutMS=settings.store_timeout_ms,
        )
        logger.info("MongoDB client created for database '%s'", settings.mongo_database)
    return _client


def get_posts_collection_from(client: AsyncMongoClient) -> AsyncCollection:
    """The configured posts collection on the given client."""
    return client[settings.mongo_database][settings.posts_collection]


async def get_posts_collection() -> AsyncCollection:
    """
    FastAPI dependency that provides the posts collection.

    Example usage in a route:
        @router.get("/")
        async def list_posts(posts: AsyncCollection = Depends(get_posts_collection)):
            ...
    """
    return get_posts_collection_from(get_client())


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def ping() -> Dict[str, Any]:
    """Round-trip to the server. Raises PyMongoError when unreachable."""
    return await get_client().admin.command("ping")


async def ping_with_retry() -> None:
    """
    Ping the store, retrying transient failures with exponential backoff.

    When:   Called once during application startup.
    Raises: The last PyMongoError when every attempt failed.
    """
    async for attempt in AsyncRetrying(
        retry=retry_if_exception_type(PyMongoError),
        stop=stop_after_attempt(settings.retry_max_attempts),
        wait=wait_exponential_jitter(
            initial=settings.retry_min_wait,
            max=settings.retry_max_wait,
            jitter=1,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    ):
        with attempt:
            await ping()


async def dispose_client() -> None:
    """
    What:  Closes the client and its connection pool.
    When:  Called during application shutdown (lifespan handler).
    """
    global _client
    if _client is not None:
        await _client.close()
        _client = None
        logger.info("MongoDB client closed")
