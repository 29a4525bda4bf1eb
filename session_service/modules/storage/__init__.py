"""
Storage Module - Black Box Interface

Purpose: Abstract all data persistence
Interface: StorageModule.connect(), RedisDocumentStore insert/find/replace/delete
Hidden: Redis specifics, key layout, transactions, serialization

Can be replaced with any document database without affecting other modules.
"""

import os
from typing import Optional

import redis.asyncio as redis

from .document_store import RedisDocumentStore


class StorageModule:
    """Black box storage connection."""

    def __init__(self, connection_url: str = None, password: Optional[str] = None):
        """Initialize storage with connection URL."""
        self.url = connection_url or os.getenv("REDIS_URL", "redis://localhost:6379/0")
        self.password = password
        self._client = None

    async def connect(self) -> redis.Redis:
        """Get storage connection."""
        if not self._client:
            self._client = redis.from_url(
                self.url,
                password=self.password,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    async def disconnect(self):
        """Close storage connection."""
        if self._client:
            await self._client.aclose()
            self._client = None


__all__ = ["StorageModule", "RedisDocumentStore"]
