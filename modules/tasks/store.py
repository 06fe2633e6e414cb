"""Task-id -> originating chat mappings, kept for a bounded time."""

from __future__ import annotations

import asyncio
import time
from collections import OrderedDict
from typing import Callable, Protocol

import redis.asyncio as aioredis
import structlog

from shared.config import Settings
from shared.schemas.tasks import TaskMapping

logger = structlog.get_logger()

DEFAULT_TTL_SECONDS = 86400
DEFAULT_MAX_ENTRIES = 10_000


class TaskMappingStore(Protocol):
    async def put(self, mapping: TaskMapping) -> None: ...

    async def get(self, task_id: str) -> TaskMapping | None: ...

    async def delete(self, task_id: str) -> None: ...


class InMemoryTaskMappingStore:
    """Single-process store.

    Entries expire after *ttl_seconds*; once *max_entries* is reached the
    oldest entry is evicted. All access happens under one lock.
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, TaskMapping]] = OrderedDict()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def _sweep(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]

    async def put(self, mapping: TaskMapping) -> None:
        async with self._lock:
            now = self._clock()
            self._sweep(now)
            self._entries.pop(mapping.task_id, None)
            while len(self._entries) >= self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.warning("task_mapping_evicted", task_id=evicted)
            self._entries[mapping.task_id] = (now + self.ttl_seconds, mapping)

    async def get(self, task_id: str) -> TaskMapping | None:
        async with self._lock:
            entry = self._entries.get(task_id)
            if entry is None:
                return None
            expires_at, mapping = entry
            if expires_at <= self._clock():
                del self._entries[task_id]
                return None
            return mapping

    async def delete(self, task_id: str) -> None:
        async with self._lock:
            self._entries.pop(task_id, None)


class RedisTaskMappingStore:
    """Store shared by every process, expiring entries with ``SET ... EX``."""

    KEY_PREFIX = "devflow:task:"

    def __init__(self, redis_client: aioredis.Redis, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds

    def _key(self, task_id: str) -> str:
        return f"{self.KEY_PREFIX}{task_id}"

    async def put(self, mapping: TaskMapping) -> None:
        await self.redis.set(
            self._key(mapping.task_id),
            mapping.model_dump_json(by_alias=True),
            ex=self.ttl_seconds,
        )

    async def get(self, task_id: str) -> TaskMapping | None:
        raw = await self.redis.get(self._key(task_id))
        if raw is None:
            return None
        return TaskMapping.model_validate_json(raw)

    async def delete(self, task_id: str) -> None:
        await self.redis.delete(self._key(task_id))


def build_task_store(
    settings: Settings, redis_client: aioredis.Redis | None = None
) -> TaskMappingStore:
    """Pick the backend named by ``settings.task_store_backend``."""
    if settings.task_store_backend == "redis" and redis_client is not None:
        return RedisTaskMappingStore(redis_client, settings.task_mapping_ttl_seconds)
    if settings.task_store_backend == "redis":
        logger.warning("task_store_redis_unavailable", fallback="memory")
    return InMemoryTaskMappingStore(
        settings.task_mapping_ttl_seconds, settings.task_mapping_max_entries
    )


def connect_task_redis(settings: Settings) -> aioredis.Redis:
    """Client for the shared task store. Responses are decoded to ``str``.

    No connection is made until the first command; the caller closes it.
    """
    return aioredis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
