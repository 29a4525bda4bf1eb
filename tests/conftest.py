"""
Shared pytest fixtures for session service tests.

This module provides common fixtures including:
- Redis mocks for call-level store tests
- An in-memory async Redis double for tests that read back what they write
- Document store and session repository instances wired to the double
"""

import asyncio
import os
import sys
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from session_service.modules.session import SessionRepository
from session_service.modules.storage import RedisDocumentStore


# =============================================================================
# Redis Mocking Infrastructure
# =============================================================================


@pytest.fixture
def mock_redis():
    """Create a mock Redis client for async operations."""
    redis = AsyncMock()

    # Basic operations
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.mget = AsyncMock(return_value=[])
    redis.delete = AsyncMock(return_value=1)
    redis.incr = AsyncMock(return_value=1)
    redis.ping = AsyncMock(return_value=True)

    # Sorted set operations
    redis.zadd = AsyncMock(return_value=1)
    redis.zrange = AsyncMock(return_value=[])
    redis.zrem = AsyncMock(return_value=1)

    # Pub/sub
    redis.publish = AsyncMock(return_value=0)

    # Pipeline support (command methods are sync, execute is async)
    pipeline = MagicMock()
    pipeline.execute = AsyncMock(return_value=[True, 1])
    redis.pipeline = MagicMock(return_value=pipeline)

    return redis


class InMemoryPipeline:
    """Queues commands and replays them back to back on execute()."""

    def __init__(self, redis: "InMemoryRedis"):
        self._redis = redis
        self._commands = []

    def __getattr__(self, name):
        command = getattr(self._redis, name)

        def queue(*args, **kwargs):
            self._commands.append((command, args, kwargs))
            return self

        return queue

    async def execute(self) -> List[Any]:
        commands, self._commands = self._commands, []
        self._redis.transactions += 1
        # No await between commands yields to the loop, so the batch is atomic
        return [await command(*args, **kwargs) for command, args, kwargs in commands]


class InMemoryRedis:
    """
    Async Redis double with in-memory data storage.

    Supports the subset of commands the document store issues, with
    decode_responses=True semantics (values are str).
    """

    def __init__(self):
        self._storage: Dict[str, str] = {}
        self._zsets: Dict[str, Dict[str, float]] = {}
        self.published: List[tuple] = []
        self.transactions = 0

    async def get(self, key: str) -> Optional[str]:
        return self._storage.get(key)

    async def set(self, key: str, value: str, nx: bool = False, xx: bool = False, **kwargs):
        exists = key in self._storage
        if (nx and exists) or (xx and not exists):
            return None
        self._storage[key] = value
        return True

    async def mget(self, keys: List[str]) -> List[Optional[str]]:
        return [self._storage.get(key) for key in keys]

    async def delete(self, *keys: str) -> int:
        count = 0
        for key in keys:
            if key in self._storage:
                del self._storage[key]
                count += 1
        return count

    async def exists(self, *keys: str) -> int:
        return sum(1 for key in keys if key in self._storage)

    async def incr(self, key: str) -> int:
        # Yield so concurrent callers interleave here, as over a network
        await asyncio.sleep(0)
        value = int(self._storage.get(key, "0")) + 1
        self._storage[key] = str(value)
        return value

    async def zadd(self, name: str, mapping: Dict[str, float], nx: bool = False) -> int:
        zset = self._zsets.setdefault(name, {})
        added = 0
        for member, score in mapping.items():
            if member in zset:
                if nx:
                    continue
            else:
                added += 1
            zset[member] = score
        return added

    async def zrange(self, name: str, start: int, end: int) -> List[str]:
        members = sorted(self._zsets.get(name, {}).items(), key=lambda item: (item[1], item[0]))
        ordered = [member for member, _ in members]
        return ordered[start:] if end == -1 else ordered[start:end + 1]

    async def zrem(self, name: str, *values: str) -> int:
        zset = self._zsets.get(name, {})
        return sum(1 for value in values if zset.pop(value, None) is not None)

    async def publish(self, channel: str, message: str) -> int:
        self.published.append((channel, message))
        return 0

    async def ping(self) -> bool:
        return True

    def pipeline(self, transaction: bool = True) -> InMemoryPipeline:
        return InMemoryPipeline(self)


@pytest.fixture
def mock_redis_with_data():
    """
    Redis double with in-memory data storage for more realistic tests.

    This allows testing code that reads back what it writes.
    """
    return InMemoryRedis()


@pytest.fixture
def document_store(mock_redis_with_data):
    """Document store backed by the in-memory Redis double."""
    return RedisDocumentStore(mock_redis_with_data, key_prefix="test")


@pytest.fixture
def session_repository(document_store):
    """Session repository backed by the in-memory Redis double."""
    return SessionRepository(document_store)


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring infrastructure"
    )
